"""
Authorization gate: checker outcomes, role merging and ordering.
"""

import pytest

from rudder import Authorized, ForbiddenError, Get, JsonController, QueryParam


def token_checker(ctx, roles):
    token = ctx.request.header("authorization")
    if token is None:
        return False
    granted = {"admin": ["admin", "editor"], "editor": ["editor"]}.get(token, [])
    return all(role in granted for role in roles)


class TestAuthorized:

    @pytest.mark.asyncio
    async def test_without_roles(self, client_factory):
        @JsonController()
        class C:
            @Get("/private")
            @Authorized()
            def private(self):
                return {"ok": True}

        client = client_factory(authorization_checker=token_checker)
        assert (await client.get("/private", headers={"authorization": "editor"})).status_code == 200

        denied = await client.get("/private")
        assert denied.status_code == 401
        assert denied.json()["name"] == "AuthorizationRequiredError"

    @pytest.mark.asyncio
    async def test_with_roles(self, client_factory):
        @JsonController()
        class C:
            @Get("/admin")
            @Authorized("admin")
            def admin(self):
                return {"ok": True}

        client = client_factory(authorization_checker=token_checker)
        assert (await client.get("/admin", headers={"authorization": "admin"})).status_code == 200

        denied = await client.get("/admin", headers={"authorization": "editor"})
        assert denied.status_code == 403
        assert denied.json()["name"] == "AccessDeniedError"

    @pytest.mark.asyncio
    async def test_class_and_method_roles_merged(self, client_factory):
        seen = []

        async def checker(ctx, roles):
            seen.append(roles)
            return True

        @Authorized("editor")
        @JsonController()
        class C:
            @Get("/both")
            @Authorized(["admin", "editor"])
            def both(self):
                return {}

            @Get("/class-only")
            def class_only(self):
                return {}

        client = client_factory(authorization_checker=checker)
        await client.get("/both")
        await client.get("/class-only")
        assert seen == [["editor", "admin"], ["editor"]]

    @pytest.mark.asyncio
    async def test_checker_missing(self, client_factory):
        @JsonController()
        class C:
            @Get("/private")
            @Authorized
            def private(self):
                return {}

        response = await client_factory().get("/private")
        assert response.status_code == 500
        assert response.json()["name"] == "AuthorizationCheckerNotDefinedError"

    @pytest.mark.asyncio
    async def test_checker_errors(self, client_factory):
        def broken(ctx, roles):
            raise RuntimeError("token store down")

        def forbidding(ctx, roles):
            raise ForbiddenError("Banned")

        @JsonController()
        class C:
            @Get("/private")
            @Authorized("admin")
            def private(self):
                return {}

        assert (await client_factory(authorization_checker=broken).get("/private")).status_code == 403

        banned = await client_factory(authorization_checker=forbidding).get("/private")
        assert banned.status_code == 403
        assert banned.json() == {"name": "ForbiddenError", "message": "Banned"}

    @pytest.mark.asyncio
    async def test_runs_before_parameter_resolution(self, client_factory):
        @JsonController()
        class C:
            @Get("/private")
            @Authorized()
            def private(self, q: str = QueryParam(required=True)):
                return {}

        response = await client_factory(authorization_checker=lambda ctx, roles: False).get("/private")
        assert response.status_code == 401
