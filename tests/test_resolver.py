"""Tests for declaration validation and version resolution."""

import pytest

from versionroute import (
    AppSettings,
    ConflictingConstraints,
    InvalidConfiguration,
    InvalidDeclaration,
    InvalidVersionValue,
    RangeViolation,
    RouteDeclaration,
    StaticVersion,
    VersionRouteError,
    resolve_route,
    resolve_versions,
)


class CountingSource:
    def __init__(self, value):
        self.value = value
        self.calls = 0

    def current_api_version(self):
        self.calls += 1
        return self.value


def settings(current):
    return AppSettings({"currentApiVersion": current})


@pytest.mark.parametrize("template", ["GamingGroups", "GamingGroups/{id}", "Examples/", " x"])
def test_declaration_keeps_template_unchanged(template):
    assert RouteDeclaration(template).template == template


@pytest.mark.parametrize("template", [None, "", "   ", "\t\n"])
def test_blank_template_is_rejected(template):
    with pytest.raises(InvalidDeclaration):
        RouteDeclaration(template)


def test_template_with_leading_slash_is_rejected():
    with pytest.raises(InvalidDeclaration) as excinfo:
        RouteDeclaration("/GamingGroups")
    assert "cannot start with a forward slash" in str(excinfo.value)


def test_errors_share_a_value_error_base():
    assert issubclass(InvalidDeclaration, VersionRouteError)
    assert issubclass(RangeViolation, ValueError)


def test_no_constraint_covers_every_version_up_to_current():
    route = resolve_route(RouteDeclaration("GamingGroups"), settings("3"))
    assert route.versions == (1, 2, 3)
    assert route.template == "api/v{version:int:regex(1|2|3)}/GamingGroups"


def test_explicit_versions_are_used_verbatim():
    source = CountingSource("50")
    declaration = RouteDeclaration("GamingGroups", accepted_versions=[2, 3, 4])
    route = resolve_route(declaration, source)
    assert route.versions == (2, 3, 4)
    assert route.template == "api/v{version:int:regex(2|3|4)}/GamingGroups"
    assert source.calls == 0


def test_explicit_versions_keep_order_and_duplicates():
    declaration = RouteDeclaration("Examples/", accepted_versions=[4, 2, 2])
    assert resolve_versions(declaration, settings("1")) == (4, 2, 2)


def test_explicit_versions_reject_negative_values():
    declaration = RouteDeclaration("GamingGroups", accepted_versions=[2, 3, -4])
    with pytest.raises(InvalidVersionValue):
        resolve_versions(declaration, settings("50"))


def test_explicit_versions_reject_zero_and_empty():
    with pytest.raises(InvalidVersionValue):
        resolve_versions(RouteDeclaration("A", accepted_versions=[0]), settings("5"))
    with pytest.raises(InvalidVersionValue):
        resolve_versions(RouteDeclaration("A", accepted_versions=[]), settings("5"))


def test_starting_version_extends_to_current():
    route = resolve_route(RouteDeclaration("GamingGroups", starting_version=2), settings("4"))
    assert route.versions == (2, 3, 4)
    assert route.template == "api/v{version:int:regex(2|3|4)}/GamingGroups"


def test_starting_version_equal_to_current_yields_single_version():
    declaration = RouteDeclaration("GamingGroups", starting_version=4)
    assert resolve_versions(declaration, settings(4)) == (4,)


@pytest.mark.parametrize("starting", [1, 2, 99])
def test_both_constraints_conflict(starting):
    declaration = RouteDeclaration("GamingGroups", accepted_versions=[2], starting_version=starting)
    with pytest.raises(ConflictingConstraints):
        resolve_versions(declaration, settings("50"))


def test_starting_version_above_current_is_a_range_violation():
    declaration = RouteDeclaration("GamingGroups", starting_version=2)
    with pytest.raises(RangeViolation):
        resolve_versions(declaration, settings("1"))


def test_non_positive_starting_version_is_rejected():
    with pytest.raises(InvalidVersionValue):
        resolve_versions(RouteDeclaration("A", starting_version=0), settings("3"))


@pytest.mark.parametrize("current", ["-1", "0", "abc", "", None, "2.5", "1_0", "3.0", 3.0, True])
def test_bad_current_version_is_a_configuration_error(current):
    with pytest.raises(InvalidConfiguration) as excinfo:
        resolve_versions(RouteDeclaration("GamingGroups"), settings(current))
    assert "'currentApiVersion' app setting must be a positive integer" in str(excinfo.value)


def test_missing_setting_key_is_a_configuration_error():
    with pytest.raises(InvalidConfiguration):
        resolve_versions(RouteDeclaration("GamingGroups"), AppSettings({}))


def test_configuration_is_checked_before_the_range():
    declaration = RouteDeclaration("GamingGroups", starting_version=5)
    with pytest.raises(InvalidConfiguration):
        resolve_versions(declaration, StaticVersion("-1"))


def test_resolution_is_idempotent():
    declaration = RouteDeclaration("GamingGroups", starting_version=2)
    source = settings("6")
    first = resolve_route(declaration, source)
    second = resolve_route(declaration, source)
    assert first == second
    assert first.template == second.template
