"""
HTTP routes for the User-Agent parser.

Usage:
    from adaptive_uaparser import new_parser
    from adaptive_uaparser.routes import create_parser_router

    parser = new_parser(Path("regexes.yaml"))
    app.include_router(create_parser_router(parser), prefix="/ua")
"""

from fastapi import APIRouter, Query, Request

from .parser import Parser


def create_parser_router(parser: Parser) -> APIRouter:
    """Create routes exposing a shared parser."""
    router = APIRouter()

    @router.get("/parse")
    def parse(request: Request, ua: str | None = Query(None, description="User-Agent to parse")):
        """Parse the given User-Agent, or the caller's own header."""
        line = ua if ua is not None else request.headers.get("user-agent", "")
        return parser.parse(line).to_dict()

    @router.get("/stats")
    def stats():
        """Catalog order and counters."""
        return parser.stats()

    return router
