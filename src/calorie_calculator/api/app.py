"""FastAPI application factory."""

import logging

from fastapi import Body, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calorie_calculator.api.auth import router as auth_router
from calorie_calculator.api.schemas import food_to_payload, meal_to_payload
from calorie_calculator.app_logging import configure_logging
from calorie_calculator.containers import AppContainer
from calorie_calculator.services.errors import ServiceError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(ServiceError)
    async def service_error_handler(
        request: Request, exc: ServiceError
    ) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed", extra={"path": request.url.path, "error": exc.message}
            )
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(
            "Rejected malformed request",
            extra={"path": request.url.path, "errors": len(exc.errors())},
        )
        return JSONResponse(
            {"error": "Invalid request body"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    app.include_router(auth_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/foods/search")
    async def search_foods(
        request: Request, query: str | None = None
    ) -> dict[str, object]:
        """Substring search over the food catalogue."""
        state_container: AppContainer = request.app.state.container
        foods = state_container.catalog_service.search(query)
        return {"foods": [food_to_payload(food) for food in foods]}

    @app.get("/foods/{food_id}")
    async def get_food(food_id: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return food_to_payload(state_container.catalog_service.get(food_id))

    @app.post("/foods", status_code=status.HTTP_201_CREATED)
    async def add_food(
        request: Request, payload: dict[str, object] = Body(...)
    ) -> dict[str, object]:
        """Create or replace a catalogue food."""
        state_container: AppContainer = request.app.state.container
        food = state_container.catalog_service.add(payload)
        return {"id": food.id, "message": "Food added", "food": food_to_payload(food)}

    @app.post("/meals", status_code=status.HTTP_201_CREATED)
    async def add_meal(
        request: Request, payload: dict[str, object] = Body(...)
    ) -> dict[str, str]:
        """Store a meal record pushed by a client."""
        state_container: AppContainer = request.app.state.container
        meal_id = state_container.meal_service.add_meal(payload)
        return {"id": meal_id, "message": "Meal added"}

    @app.get("/meals/{user_id}/daily/{day}")
    async def daily_summary(
        user_id: str, day: str, request: Request
    ) -> dict[str, object]:
        """Return one UTC day of meals with totals."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.meal_service.daily_summary(user_id, day)
        return {
            "date": summary.date,
            "meals": [meal_to_payload(meal) for meal in summary.meals],
            "summary": {
                "totalCalories": summary.totals.calories,
                "totalProtein": summary.totals.protein,
                "totalCarbs": summary.totals.carbs,
                "totalFat": summary.totals.fat,
                "mealCount": len(summary.meals),
            },
        }

    @app.get("/users/{user_id}/settings")
    async def get_settings(user_id: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return state_container.settings_service.get(user_id)

    @app.put("/users/{user_id}/settings")
    async def update_settings(
        user_id: str, request: Request, payload: dict[str, object] = Body(...)
    ) -> dict[str, object]:
        """Replace a user's settings document."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings_service.update(user_id, payload)
        return {"message": "Settings updated", "settings": settings}

    return app
