"""
Response resolution: status precedence, null/undefined policies, content
types, headers, redirects, templates and body transformation.
"""

from typing import Annotated

import pytest

from rudder import (
    UNDEFINED,
    ContentType,
    Controller,
    Get,
    Header,
    HttpCode,
    HttpError,
    JsonController,
    Location,
    OnNull,
    OnUndefined,
    Post,
    QueryParam,
    Redirect,
    Render,
    Res,
    Response,
    ResponseClassTransformOptions,
)
from rudder.config import Defaults
from rudder.validation import Length, TransformOptions


class QuestionNotFoundError(HttpError):
    def __init__(self, ctx):
        super().__init__(404, "Question was not found!")


class PhotoFilter:
    keyword: Annotated[str, Length(5, 15)]


class User:
    def __init__(self, name, password):
        self.name = name
        self.password = password
        self._cache = {}


class TestNullAndUndefined:

    @pytest.mark.asyncio
    async def test_null_ignores_on_undefined_rule(self, client_factory):
        @Controller()
        class PhotoController:
            @Get("/photos/:id")
            @OnUndefined(201)
            def get_one(self, id: int):
                return None

        response = await client_factory().get("/photos/3")
        assert response.status_code == 204
        assert response.body == b""

    @pytest.mark.asyncio
    async def test_undefined_uses_on_undefined_code(self, client_factory):
        @Controller()
        class PhotoController:
            @Get("/photos/:id")
            @OnUndefined(201)
            async def get_one(self, id: int):
                return UNDEFINED

        response = await client_factory().get("/photos/4")
        assert response.status_code == 201
        assert response.body == b""

    @pytest.mark.asyncio
    async def test_undefined_error_class_goes_to_error_mapper(self, client_factory):
        @JsonController()
        class QuestionController:
            @Get("/questions/:id")
            @OnUndefined(QuestionNotFoundError)
            def get_one(self, id: int):
                return UNDEFINED

        response = await client_factory().get("/questions/2")
        assert response.status_code == 404
        assert response.json() == {"name": "QuestionNotFoundError", "message": "Question was not found!"}

    @pytest.mark.asyncio
    async def test_null_defaults(self, client_factory):
        @JsonController("/json")
        class JsonPhotos:
            @Get("/")
            def get_one(self):
                return None

            @Get("/code")
            @OnNull(410)
            def gone(self):
                return None

            @Get("/error")
            @OnNull(QuestionNotFoundError)
            def missing(self):
                return None

        @Controller("/plain")
        class PlainPhotos:
            @Get("/")
            def get_one(self):
                return None

            @Get("/undefined")
            def nothing(self):
                return UNDEFINED

        client = client_factory()
        assert (await client.get("/json")).status_code == 404
        assert (await client.get("/json/code")).status_code == 410
        assert (await client.get("/json/error")).json()["name"] == "QuestionNotFoundError"
        assert (await client.get("/plain")).status_code == 204
        assert (await client.get("/plain/undefined")).status_code == 204

    @pytest.mark.asyncio
    async def test_configured_defaults(self, client_factory):
        @JsonController()
        class C:
            @Get("/null")
            def null(self):
                return None

            @Get("/undefined")
            def undefined(self):
                return UNDEFINED

        client = client_factory(defaults=Defaults(null_result_code=200, undefined_result_code=202))
        assert (await client.get("/null")).status_code == 200
        assert (await client.get("/undefined")).status_code == 202


class TestValidationScenarios:

    @pytest.mark.asyncio
    async def test_short_keyword_rejected(self, client_factory):
        @JsonController()
        class PhotoController:
            @Get("/photos")
            def search(self, filter: Annotated[PhotoFilter, QueryParam(validate=True)]):
                return {"keyword": filter.keyword}

        response = await client_factory().get("/photos", query={"filter": '{"keyword": "Um", "limit": 5}'})
        assert response.status_code == 400
        assert response.json()["paramName"] == "filter"

    @pytest.mark.asyncio
    async def test_valid_keyword_transformed_with_undeclared_fields(self, client_factory):
        received = []

        @JsonController()
        class PhotoController:
            @Get("/photos")
            def search(self, filter: Annotated[PhotoFilter, QueryParam(validate=True)]):
                received.append(filter)
                return {"keyword": filter.keyword}

        response = await client_factory().get("/photos", query={"filter": '{"keyword": "Umedi", "limit": 5}'})
        assert response.status_code == 200
        (filter,) = received
        assert isinstance(filter, PhotoFilter)
        assert filter.keyword == "Umedi"
        assert filter.limit == 5


class TestStatusAndContent:

    @pytest.mark.asyncio
    async def test_status_precedence(self, client_factory):
        @JsonController()
        class C:
            @Post("/created", status_code=201)
            def created(self):
                return {"ok": True}

            @Post("/accepted", status_code=201)
            @HttpCode(202)
            def accepted(self):
                return {"ok": True}

            @Get("/draft")
            def draft(self, response=Res()):
                response.status = 203
                return {"ok": True}

        client = client_factory()
        assert (await client.post("/created")).status_code == 201
        assert (await client.post("/accepted")).status_code == 202
        assert (await client.get("/draft")).status_code == 203

    @pytest.mark.asyncio
    async def test_content_types(self, client_factory):
        @Controller()
        class Pages:
            @Get("/html")
            def html(self):
                return "<h1>hi</h1>"

            @Get("/bytes")
            def raw(self):
                return b"\x00\x01"

            @Get("/data")
            def data(self):
                return {"a": 1}

            @Get("/csv")
            @ContentType("text/csv")
            def csv(self):
                return "a,b\n1,2\n"

        @JsonController("/api")
        class Api:
            @Get("/text")
            def text(self):
                return "hello"

        client = client_factory()
        html = await client.get("/html")
        assert html.content_type == "text/html"
        assert html.text == "<h1>hi</h1>"
        assert (await client.get("/bytes")).content_type == "application/octet-stream"
        assert (await client.get("/data")).json() == {"a": 1}
        assert (await client.get("/csv")).content_type == "text/csv"

        text = await client.get("/api/text")
        assert text.content_type == "application/json"
        assert text.json() == "hello"

    @pytest.mark.asyncio
    async def test_returned_response_passes_through(self, client_factory):
        @JsonController()
        class C:
            @Get("/raw")
            @Header("x-extra", "1")
            def raw(self):
                return Response.text("custom", status=299)

        response = await client_factory().get("/raw")
        assert response.status_code == 299
        assert response.text == "custom"
        assert response.header("x-extra") == "1"

    @pytest.mark.asyncio
    async def test_response_transformation(self, client_factory):
        @JsonController()
        class C:
            @Get("/user")
            def user(self):
                return User("ada", "secret")

            @Get("/safe-user")
            @ResponseClassTransformOptions(exclude=["password"])
            def safe_user(self):
                return User("ada", "secret")

        client = client_factory()
        assert (await client.get("/user")).json() == {"name": "ada", "password": "secret"}
        assert (await client.get("/safe-user")).json() == {"name": "ada"}

    @pytest.mark.asyncio
    async def test_global_class_to_plain_options(self, client_factory):
        @JsonController()
        class C:
            @Get("/user")
            def user(self):
                return User("ada", "secret")

        client = client_factory(class_to_plain_options=TransformOptions(exclude=["password"]))
        assert (await client.get("/user")).json() == {"name": "ada"}


class TestHeadersAndRedirects:

    @pytest.mark.asyncio
    async def test_stacked_headers(self, client_factory):
        @Header("x-scope", "class")
        @JsonController()
        class C:
            @Get("/different")
            @Header("x-one", "1")
            @Header("x-two", "2")
            def different(self):
                return {}

            @Get("/same")
            @Header("x-value", "first")
            @Header("x-value", "second")
            def same(self):
                return {}

            @Get("/override")
            @Header("x-scope", "method")
            def override(self):
                return {}

        client = client_factory()
        different = await client.get("/different")
        assert different.header("x-one") == "1"
        assert different.header("x-two") == "2"
        assert different.header("x-scope") == "class"

        assert (await client.get("/same")).header("x-value") == "second"
        assert (await client.get("/override")).header("x-scope") == "method"

    @pytest.mark.asyncio
    async def test_repeated_request_is_identical(self, client_factory):
        @Header("x-scope", "class")
        @JsonController()
        class C:
            @Post("/photos/:id", status_code=201)
            @Header("x-one", "1")
            @Location("/photos/1")
            def update(self, id: int, response=Res()):
                response.set_header("x-draft", str(id))
                return {"id": id}

        client = client_factory()
        first = await client.post("/photos/7", json={"title": "Dawn"})
        second = await client.post("/photos/7", json={"title": "Dawn"})
        assert (first.status_code, first.headers, first.body) == (second.status_code, second.headers, second.body)
        assert first.status_code == 201
        assert first.header("x-draft") == "7"
        assert first.header("x-scope") == "class"

    @pytest.mark.asyncio
    async def test_redirects(self, client_factory):
        @Controller()
        class C:
            @Get("/static")
            @Redirect("https://example.com")
            def static(self):
                return None

            @Get("/dynamic")
            @Redirect("https://example.com")
            def dynamic(self):
                return "https://other.example.com"

            @Get("/templated")
            @Redirect("https://example.com/:owner/:repo", 301)
            def templated(self):
                return {"owner": "pleerock", "repo": "routing"}

        client = client_factory()
        static = await client.get("/static")
        assert static.status_code == 302
        assert static.location == "https://example.com"
        assert static.body == b""

        assert (await client.get("/dynamic")).location == "https://other.example.com"

        templated = await client.get("/templated")
        assert templated.status_code == 301
        assert templated.location == "https://example.com/pleerock/routing"

    @pytest.mark.asyncio
    async def test_location_keeps_status(self, client_factory):
        @JsonController()
        class C:
            @Post("/photos", status_code=201)
            @Location("/photos/1")
            def create(self):
                return {"id": 1}

        response = await client_factory().post("/photos")
        assert response.status_code == 201
        assert response.location == "/photos/1"


class TestRender:

    @pytest.mark.asyncio
    async def test_render_template(self, client_factory, tmp_path):
        (tmp_path / "photo.html").write_text("<p>{{ title }} by {{ author }}</p>")

        @Controller()
        class C:
            @Get("/photo")
            @Render("photo.html")
            def photo(self):
                return {"title": "Dawn", "author": "<ada>"}

        response = await client_factory(view_dir=str(tmp_path)).get("/photo")
        assert response.status_code == 200
        assert response.content_type == "text/html"
        assert response.text == "<p>Dawn by &lt;ada&gt;</p>"
