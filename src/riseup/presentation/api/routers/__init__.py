from riseup.presentation.api.routers.search import router as search_router
from riseup.presentation.api.routers.translate import router as translate_router

__all__ = [
    "search_router",
    "translate_router",
]
