from app.api.modules.v1.tickets.routes.ticket_routes import router

__all__ = ["router"]
