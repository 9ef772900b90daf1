from .folder import router as folder_router
from .note import router as note_router

routers = [
    folder_router,
    note_router,
]
