"""
Error mapping: HTTP errors, unclassified failures, overrides and modes.
"""

import pytest

from rudder import (
    BadRequestError,
    Body,
    Controller,
    ErrorCode,
    Get,
    HttpError,
    JsonController,
    Post,
    RoutingOptions,
)
from rudder.engine import ErrorMapper


class PaymentRequiredError(HttpError):
    def __init__(self):
        super().__init__(402, "Pay first")


class LegacyError(Exception):
    http_code = 409

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class TestErrorMapper:

    def test_http_error(self):
        response = ErrorMapper(RoutingOptions()).map(PaymentRequiredError())
        assert response.status == 402
        assert response.json_body() == {"name": "PaymentRequiredError", "message": "Pay first"}

    def test_foreign_error_with_http_code(self):
        response = ErrorMapper(RoutingOptions()).map(LegacyError("conflict"))
        assert response.status == 409
        assert response.json_body() == {"name": "LegacyError", "message": "conflict"}

    def test_partial_body_is_completed(self):
        class TeapotError(Exception):
            http_code = 418

            def to_body(self):
                return {"msg": "teapot"}

        options = RoutingOptions(error_overriding_map={"TeapotError": {"hint": "brew coffee"}})
        response = ErrorMapper(options).map(TeapotError("short and stout"))
        assert response.status == 418
        assert response.json_body() == {
            "msg": "teapot",
            "name": "TeapotError",
            "message": "short and stout",
            "hint": "brew coffee",
        }

    def test_unclassified_in_production(self):
        response = ErrorMapper(RoutingOptions(development=False)).map(ValueError("db password is hunter2"))
        assert response.status == 500
        assert response.json_body() == {"name": "InternalServerError", "message": "Internal Server Error"}

    def test_unclassified_in_development(self):
        try:
            raise ValueError("boom")
        except ValueError as e:
            error = e

        body = ErrorMapper(RoutingOptions(development=True)).map(error).json_body()
        assert body["name"] == "ValueError"
        assert body["message"] == "boom"
        assert "Traceback" in body["stack"]

    def test_overriding_map(self):
        options = RoutingOptions(error_overriding_map={
            "BadRequestError": {"message": "Check your input", "status": 422, "code": "E_INPUT"},
        })
        response = ErrorMapper(options).map(BadRequestError("bad"))
        assert response.status == 422
        assert response.json_body() == {"name": "BadRequestError", "message": "Check your input", "code": "E_INPUT"}


class TestPipelineErrors:

    @pytest.mark.asyncio
    async def test_sync_and_async_raises_are_identical(self, client_factory):
        @JsonController()
        class C:
            @Get("/sync")
            def sync(self):
                raise PaymentRequiredError()

            @Get("/async")
            async def async_(self):
                raise PaymentRequiredError()

        client = client_factory()
        sync = await client.get("/sync")
        async_ = await client.get("/async")
        assert (sync.status_code, sync.json()) == (async_.status_code, async_.json())
        assert sync.status_code == 402

    @pytest.mark.asyncio
    async def test_foreign_error_keeps_its_status(self, client_factory):
        class TeapotError(Exception):
            http_code = 418

            def to_body(self):
                return {"msg": "teapot"}

        @JsonController()
        class C:
            @Get("/tea")
            def tea(self):
                raise TeapotError()

        response = await client_factory().get("/tea")
        assert response.status_code == 418
        assert response.json()["name"] == "TeapotError"

    @pytest.mark.asyncio
    async def test_error_code_for_unclassified(self, client_factory):
        @JsonController()
        class C:
            @Get("/flaky")
            @ErrorCode(503)
            def flaky(self):
                raise RuntimeError("upstream")

            @Get("/declared")
            @ErrorCode(503)
            def declared(self):
                raise BadRequestError("nope")

        client = client_factory()
        assert (await client.get("/flaky")).status_code == 503
        assert (await client.get("/declared")).status_code == 400

    @pytest.mark.asyncio
    async def test_plain_controller_gets_text(self, client_factory):
        @Controller()
        class C:
            @Get("/fail")
            def fail(self):
                raise BadRequestError("Wrong input")

        response = await client_factory().get("/fail")
        assert response.status_code == 400
        assert response.content_type == "text/plain"
        assert response.text == "Wrong input"

    @pytest.mark.asyncio
    async def test_malformed_json_body(self, client_factory):
        @JsonController()
        class C:
            @Post("/echo")
            def echo(self, payload=Body()):
                return payload

        response = await client_factory().post(
            "/echo", body=b"{oops", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["name"] == "BadRequestError"
