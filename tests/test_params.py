"""
Parameter resolution: sources, parsing, normalization, transformation,
validation and requiredness.
"""

import enum
from typing import Annotated, List, Optional

import pytest

from rudder import (
    Body,
    BodyParam,
    CookieParam,
    CurrentUser,
    Custom,
    Get,
    HeaderParam,
    HeaderParams,
    JsonController,
    Param,
    Post,
    QueryParam,
    QueryParams,
    Req,
    Res,
    Session,
    SessionParam,
    create_param_decorator,
)
from rudder.config import Defaults, ParamDefaults
from rudder.engine import normalize_primitive
from rudder.validation import IsEmail, Length, Max, ValidatorOptions


class Color(enum.Enum):
    RED = "red"
    BLUE = "blue"


class Author:
    name: str


class Photo:
    title: Annotated[str, Length(3, 20)]
    author: Author


class PhotoFilter:
    keyword: Annotated[str, Length(5, 15)]
    limit: Annotated[int, Max(100)] = 10


class Signup:
    email: Annotated[str, IsEmail()]


class TestNormalizePrimitive:

    def test_numbers(self):
        assert normalize_primitive("42", int) == 42
        assert normalize_primitive("4.5", float) == 4.5
        with pytest.raises(ValueError):
            normalize_primitive("4.5", int)

    def test_booleans(self):
        assert normalize_primitive("true", bool) is True
        assert normalize_primitive("0", bool) is False
        with pytest.raises(ValueError):
            normalize_primitive("maybe", bool)

    def test_enum_and_list(self):
        assert normalize_primitive("red", Color) is Color.RED
        assert normalize_primitive(["1", "2"], List[int]) == [1, 2]
        assert normalize_primitive("3", Optional[int]) == 3


class TestSources:

    @pytest.mark.asyncio
    async def test_path_query_header_cookie(self, client_factory):
        @JsonController("/photos")
        class PhotoController:
            @Get("/:id")
            def get_one(
                self,
                id: Annotated[int, Param()],
                size: Annotated[str, QueryParam()],
                token: str = HeaderParam("x-token"),
                theme: str = CookieParam(),
            ):
                return {"id": id, "size": size, "token": token, "theme": theme}

        client = client_factory()
        client.set_cookie("theme", "dark")
        response = await client.get("/photos/5?size=large", headers={"X-Token": "abc"})

        assert response.json() == {"id": 5, "size": "large", "token": "abc", "theme": "dark"}

    @pytest.mark.asyncio
    async def test_all_query_values_for_list_target(self, client_factory):
        @JsonController()
        class C:
            @Get("/tags")
            def tags(self, tag: Annotated[List[int], QueryParam()], everything: dict = QueryParams()):
                return {"tag": tag, "everything": everything}

        client = client_factory()
        response = await client.get("/tags?tag=1&tag=2&page=3")
        assert response.json() == {"tag": [1, 2], "everything": {"tag": ["1", "2"], "page": "3"}}

    @pytest.mark.asyncio
    async def test_body_and_body_param(self, client_factory):
        @JsonController()
        class C:
            @Post("/echo")
            def echo(self, body: dict = Body(), name: str = BodyParam()):
                return {"body": body, "name": name}

        client = client_factory()
        response = await client.post("/echo", json={"name": "ada", "age": 36})
        assert response.json() == {"body": {"name": "ada", "age": 36}, "name": "ada"}

    @pytest.mark.asyncio
    async def test_headers_request_and_response_draft(self, client_factory):
        @JsonController()
        class C:
            @Get("/inspect")
            def inspect(self, headers: dict = HeaderParams(), request=Req(), response=Res()):
                response.set_header("x-seen", request.method)
                return {"agent": headers.get("user-agent")}

        client = client_factory()
        response = await client.get("/inspect", headers={"User-Agent": "pytest"})
        assert response.json() == {"agent": "pytest"}
        assert response.header("x-seen") == "GET"

    @pytest.mark.asyncio
    async def test_session_sources(self, client_factory):
        @JsonController()
        class C:
            @Get("/me")
            def me(self, session=Session(), user_id: int = SessionParam()):
                return {"keys": sorted(session), "user_id": user_id}

        client = client_factory()
        response = await client.get("/me", session={"user_id": "7", "role": "admin"})
        assert response.json() == {"keys": ["role", "user_id"], "user_id": 7}

        missing = await client.get("/me")
        assert missing.status_code == 400
        assert missing.json()["name"] == "ParamRequiredError"

    @pytest.mark.asyncio
    async def test_custom_resolvers(self, client_factory):
        async def tenant(ctx):
            return ctx.request.header("x-tenant", "").upper()

        UserAgent = create_param_decorator(lambda ctx: ctx.request.header("user-agent"), required=True)

        @JsonController()
        class C:
            @Get("/custom")
            def custom(self, tenant_name: str = Custom(tenant), agent: str = UserAgent()):
                return {"tenant": tenant_name, "agent": agent}

        client = client_factory()
        response = await client.get("/custom", headers={"x-tenant": "acme", "user-agent": "bot"})
        assert response.json() == {"tenant": "ACME", "agent": "bot"}

        missing = await client.get("/custom", headers={"x-tenant": "acme"})
        assert missing.status_code == 400


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_user_from_checker(self, client_factory):
        @JsonController()
        class C:
            @Get("/profile")
            def profile(self, user=CurrentUser()):
                return {"user": user}

        def checker(ctx):
            token = ctx.request.header("authorization")
            return {"name": "ada"} if token == "secret" else None

        client = client_factory(current_user_checker=checker)
        assert (await client.get("/profile", headers={"authorization": "secret"})).json() == {"user": {"name": "ada"}}

        anonymous = await client.get("/profile")
        assert anonymous.status_code == 401
        assert anonymous.json()["name"] == "AuthorizationRequiredError"

    @pytest.mark.asyncio
    async def test_optional_user(self, client_factory):
        @JsonController()
        class C:
            @Get("/feed")
            async def feed(self, user=CurrentUser(required=False)):
                return {"user": user}

        async def checker(ctx):
            return None

        client = client_factory(current_user_checker=checker)
        assert (await client.get("/feed")).json() == {"user": None}

    @pytest.mark.asyncio
    async def test_checker_missing(self, client_factory):
        @JsonController()
        class C:
            @Get("/profile")
            def profile(self, user=CurrentUser()):
                return user

        response = await client_factory().get("/profile")
        assert response.status_code == 500
        assert response.json()["name"] == "CurrentUserCheckerNotDefinedError"


class TestParsingAndNormalization:

    @pytest.mark.asyncio
    async def test_invalid_number(self, client_factory):
        @JsonController()
        class C:
            @Get("/items/:id")
            def get_one(self, id: int):
                return {"id": id}

        response = await client_factory().get("/items/abc")
        assert response.status_code == 400
        body = response.json()
        assert body["name"] == "ParamNormalizationError"
        assert body["paramName"] == "id"

    @pytest.mark.asyncio
    async def test_json_query_param_transformed(self, client_factory):
        @JsonController()
        class C:
            @Get("/photos")
            def search(self, filter: Annotated[PhotoFilter, QueryParam()]):
                return {"type": type(filter).__name__, "keyword": filter.keyword, "limit": filter.limit}

        client = client_factory()
        response = await client.get("/photos", query={"filter": '{"keyword": "sunset"}'})
        assert response.json() == {"type": "PhotoFilter", "keyword": "sunset", "limit": 10}

    @pytest.mark.asyncio
    async def test_malformed_json(self, client_factory):
        @JsonController()
        class C:
            @Get("/photos")
            def search(self, filter: Annotated[dict, QueryParam(parse=True)]):
                return filter

        response = await client_factory().get("/photos", query={"filter": "{not json"})
        assert response.status_code == 400
        assert response.json()["name"] == "ParameterParseJsonError"
        assert response.json()["paramName"] == "filter"

    @pytest.mark.asyncio
    async def test_enum_target(self, client_factory):
        @JsonController()
        class C:
            @Get("/paint")
            def paint(self, color: Color):
                return {"color": color}

        client = client_factory()
        assert (await client.get("/paint?color=blue")).json() == {"color": "blue"}
        assert (await client.get("/paint?color=green")).status_code == 400

    @pytest.mark.asyncio
    async def test_nested_transformation(self, client_factory):
        @JsonController()
        class C:
            @Post("/photos")
            def create(self, photo: Annotated[Photo, Body()]):
                return {
                    "photo": type(photo).__name__,
                    "author": type(photo.author).__name__,
                    "extra": photo.extra,
                }

        client = client_factory()
        response = await client.post("/photos", json={"title": "dawn", "author": {"name": "ada"}, "extra": 1})
        assert response.json() == {"photo": "Photo", "author": "Author", "extra": 1}

    @pytest.mark.asyncio
    async def test_transformation_disabled(self, client_factory):
        @JsonController(transform_request=False)
        class C:
            @Post("/photos")
            def create(self, photo: Annotated[Photo, Body()]):
                return {"plain": isinstance(photo, dict)}

        response = await client_factory().post("/photos", json={"title": "dawn"})
        assert response.json() == {"plain": True}


class TestValidation:

    @pytest.mark.asyncio
    async def test_global_validation(self, client_factory):
        @JsonController()
        class C:
            @Get("/photos")
            def search(self, filter: Annotated[PhotoFilter, QueryParam()]):
                return {"keyword": filter.keyword}

        client = client_factory(validation=True)
        ok = await client.get("/photos", query={"filter": '{"keyword": "sunset"}'})
        assert ok.status_code == 200

        response = await client.get("/photos", query={"filter": '{"keyword": "sun"}'})
        assert response.status_code == 400
        body = response.json()
        assert body["name"] == "ParamValidationError"
        assert body["paramName"] == "filter"
        assert body["errors"][0]["property"] == "keyword"
        assert "length" in body["errors"][0]["constraints"]

    @pytest.mark.asyncio
    async def test_param_level_validation_overrides_global(self, client_factory):
        @JsonController()
        class C:
            @Post("/signup")
            def signup(self, data: Annotated[Signup, Body(validate=True)]):
                return {"email": data.email}

            @Post("/lenient")
            def lenient(self, data: Annotated[Signup, Body()]):
                return {"email": data.email}

        client = client_factory(validation=False)
        assert (await client.post("/signup", json={"email": "nope"})).status_code == 400
        assert (await client.post("/lenient", json={"email": "nope"})).status_code == 200

    @pytest.mark.asyncio
    async def test_forbid_non_whitelisted(self, client_factory):
        @JsonController()
        class C:
            @Post("/signup")
            def signup(self, data: Annotated[Signup, Body()]):
                return {"email": data.email}

        client = client_factory(validation=ValidatorOptions(whitelist=True, forbid_non_whitelisted=True))
        response = await client.post("/signup", json={"email": "a@b.co", "admin": True})
        assert response.status_code == 400
        assert response.json()["errors"][0]["property"] == "admin"

    @pytest.mark.asyncio
    async def test_non_object_json_rejected(self, client_factory):
        @JsonController()
        class C:
            @Get("/photos")
            def search(self, filter: Annotated[PhotoFilter, QueryParam(validate=True)]):
                return {"keyword": filter.keyword}

            @Post("/photos")
            def create(self, photo: Annotated[PhotoFilter, Body(validate=True)]):
                return {"keyword": photo.keyword}

        client = client_factory()
        for raw in ("5", "[1, 2]", '"sunset"'):
            response = await client.get("/photos", query={"filter": raw})
            assert response.status_code == 400, raw
            body = response.json()
            assert body["name"] == "ParamValidationError"
            assert "is_instance" in body["errors"][0]["constraints"]

        response = await client.post("/photos", json=[{"keyword": "x"}])
        assert response.status_code == 400
        assert response.json()["paramName"] == "photo"

    @pytest.mark.asyncio
    async def test_list_items_must_be_objects(self, client_factory):
        @JsonController()
        class C:
            @Post("/photos")
            def create(self, filters: Annotated[List[PhotoFilter], Body(validate=True)]):
                return [f.keyword for f in filters]

        client = client_factory()
        assert (await client.post("/photos", json=[{"keyword": "sunset"}])).json() == ["sunset"]

        mixed = await client.post("/photos", json=[{"keyword": "sunset"}, 3])
        assert mixed.status_code == 400
        assert mixed.json()["errors"][0]["property"] == "1"

        short = await client.post("/photos", json=[{"keyword": "x"}])
        assert short.status_code == 400
        assert short.json()["errors"][0]["children"][0]["property"] == "keyword"

        not_a_list = await client.post("/photos", json={"keyword": "sunset"})
        assert not_a_list.status_code == 200


class TestRequiredness:

    @pytest.mark.asyncio
    async def test_missing_required_query(self, client_factory):
        @JsonController()
        class C:
            @Get("/photos")
            def search(self, q: Annotated[str, QueryParam(required=True)]):
                return q

        client = client_factory()
        response = await client.get("/photos")
        assert response.status_code == 400
        assert response.json()["paramName"] == "q"

        empty = await client.get("/photos?q=")
        assert empty.status_code == 400

    @pytest.mark.asyncio
    async def test_optional_uses_python_default(self, client_factory):
        @JsonController()
        class C:
            @Get("/photos")
            def search(self, page: int = 1, q: Optional[str] = None):
                return {"page": page, "q": q}

        client = client_factory()
        assert (await client.get("/photos")).json() == {"page": 1, "q": None}
        assert (await client.get("/photos?page=&q=x")).json() == {"page": 1, "q": "x"}

    @pytest.mark.asyncio
    async def test_method_and_global_required_defaults(self, client_factory):
        @JsonController()
        class C:
            @Get("/strict", params_required=True)
            def strict(self, q: str = QueryParam()):
                return q

            @Get("/relaxed")
            def relaxed(self, q: str = QueryParam(required=False)):
                return {"q": q}

            @Get("/default")
            def default(self, q: str = QueryParam()):
                return q

        client = client_factory(defaults=Defaults(param_options=ParamDefaults(required=True)))
        assert (await client.get("/strict")).status_code == 400
        assert (await client.get("/relaxed")).json() == {"q": None}
        assert (await client.get("/default")).status_code == 400

    @pytest.mark.asyncio
    async def test_positional_order_stable(self, client_factory):
        @JsonController()
        class C:
            @Get("/order/:a/:b")
            def order(self, b: Annotated[str, Param()], a: Annotated[str, Param()], c: str = QueryParam()):
                return [a, b, c]

        response = await client_factory().get("/order/1/2?c=3")
        assert response.json() == ["1", "2", "3"]
