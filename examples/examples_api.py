"""
Example host: one resource whose GET changed in versions 2 and 7.

Run with ``CURRENT_API_VERSION=8``; POST answers every version, GET picks the
handler matching the version segment.
"""

from __future__ import annotations

from versionroute import EnvironSettings, Router, api_route


class ExamplesApi:
    @api_route("Examples/", methods=("POST",))
    def post(self):
        return "This method is consistent for all versions of the API"

    @api_route("Examples/", accepted_versions=[1])
    def get(self):
        return "This was created for version 1 of the API"

    @api_route("Examples/", accepted_versions=[2, 3, 4, 5, 6])
    def some_breaking_change_to_get(self, version: int):
        return f"Breaking change introduced in version 2 (called as v{version})"

    @api_route("Examples/", starting_version=7)
    def latest_get(self, version: int):
        return f"Current GET behaviour (called as v{version})"


def build_router() -> Router:
    api = ExamplesApi()
    router = Router(name="examples").plug("logging").plug("pydantic")
    router.add_entry([api.post, api.get, api.some_breaking_change_to_get, api.latest_get])
    router.resolve(EnvironSettings())
    return router


if __name__ == "__main__":
    router = build_router()
    print(router.dispatch("api/v1/Examples"))
    print(router.dispatch("api/v4/Examples"))
    print(router.dispatch("api/v8/Examples"))
