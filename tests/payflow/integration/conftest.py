import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient


@pytest.fixture()
def client():
    from payflow.api.routes import payment_method_router, payment_router, register_error_handlers
    from payflow.domain import payflow

    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with payflow.domain_context():
            return await call_next(request)

    register_error_handlers(app)
    app.include_router(payment_method_router)
    app.include_router(payment_router)
    return TestClient(app)
