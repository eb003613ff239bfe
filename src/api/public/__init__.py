from .social import router as social_router

__all__ = ["social_router"]
