"""Integration tests for FastAPI integration across layers."""

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from wirebox import Injector
from wirebox.infrastructure.fastapi_integration import (
    InjectorMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
)


class Config:
    instances = 0

    def __init__(self, name="api"):
        Config.instances += 1
        self.name = name


class GreetingService:
    def __init__(self, config: Config):
        self.config = config

    def greet(self, who):
        return f"hello {who} from {self.config.name}"


@pytest.fixture(autouse=True)
def reset_counter():
    Config.instances = 0


class TestFastAPIIntegrationEndToEnd:
    """Test complete FastAPI integration scenarios."""

    def test_endpoint_with_injector_dependency(self):
        """Test that an endpoint receives an auto-wired service."""
        app = FastAPI()
        injector = Injector()
        injector.define(Config, {":name": "wirebox"})
        get_service = create_fastapi_dependency(injector, GreetingService)

        @app.get("/greet/{who}")
        def greet(who: str, service: GreetingService = Depends(get_service)):
            return {"message": service.greet(who)}

        response = TestClient(app).get("/greet/bob")

        assert response.status_code == 200
        assert response.json() == {"message": "hello bob from wirebox"}

    def test_shared_dependency_across_requests(self):
        """Test that shared types are constructed once for all requests."""
        app = FastAPI()
        injector = Injector()
        injector.share(Config)
        get_service = create_fastapi_dependency(injector, GreetingService)

        @app.get("/config-id")
        def config_id(service: GreetingService = Depends(get_service)):
            return {"id": id(service.config)}

        client = TestClient(app)
        first = client.get("/config-id").json()
        second = client.get("/config-id").json()

        assert first == second
        assert Config.instances == 1

    def test_unshared_dependency_per_request(self):
        """Test that unshared types are constructed for every request."""
        app = FastAPI()
        get_config = create_fastapi_dependency(Injector(), Config)

        @app.get("/config")
        def config(cfg: Config = Depends(get_config)):
            return {"name": cfg.name}

        client = TestClient(app)
        client.get("/config")
        client.get("/config")

        assert Config.instances == 2

    def test_middleware_and_request_dependency(self):
        """Test that request dependencies use the injector installed by the middleware."""
        app = FastAPI()
        injector = Injector()
        injector.define(Config, {":name": "middleware"})
        app.add_middleware(InjectorMiddleware, injector=injector)
        get_service = create_request_dependency(GreetingService)

        @app.get("/hello")
        def hello(service: GreetingService = Depends(get_service)):
            return {"message": service.greet("world")}

        response = TestClient(app).get("/hello")

        assert response.json() == {"message": "hello world from middleware"}

    def test_request_dependency_without_middleware_fails(self):
        """Test that missing middleware surfaces as a server error."""
        app = FastAPI()
        get_service = create_request_dependency(GreetingService)

        @app.get("/hello")
        def hello(service: GreetingService = Depends(get_service)):
            return {"message": service.greet("world")}

        with pytest.raises(RuntimeError, match="InjectorMiddleware"):
            TestClient(app).get("/hello")
