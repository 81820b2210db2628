import pytest

from userstore.core.cancellation import CancellationToken
from userstore.core.errors import OperationCancelledError
from userstore.users.default_roles import DefaultRoleAssigner, parse_role_names


@pytest.mark.parametrize(
    "configured, expected",
    [
        ("", []),
        (None, []),
        ("Admins", ["Admins"]),
        ("Admins;Editors;;", ["Admins", "Editors"]),
        (" Admins ; ;Editors", ["Admins", "Editors"]),
        (";", []),
    ],
)
def test_parse_role_names(configured, expected):
    assert parse_role_names(configured) == expected


async def test_empty_configuration_makes_no_calls(commands, queries, calls):
    assigned = await DefaultRoleAssigner(commands, queries).assign_defaults("s_main", "u_1", "")

    assert assigned == []
    assert calls == []


async def test_single_role_is_looked_up_and_assigned_once(commands, queries, calls):
    queries.add_role("s_main", "Admins")

    await DefaultRoleAssigner(commands, queries).assign_defaults("s_main", "u_1", "Admins")

    assert calls == [
        ("fetch_role", "s_main", "Admins"),
        ("add_user_to_role", "r_admins", "u_1"),
    ]


async def test_roles_are_processed_in_listed_order_skipping_blanks(commands, queries, calls):
    queries.add_role("s_main", "Admins")
    queries.add_role("s_main", "Editors")

    await DefaultRoleAssigner(commands, queries).assign_defaults("s_main", "u_1", "Admins;Editors;;")

    assert calls == [
        ("fetch_role", "s_main", "Admins"),
        ("add_user_to_role", "r_admins", "u_1"),
        ("fetch_role", "s_main", "Editors"),
        ("add_user_to_role", "r_editors", "u_1"),
    ]


async def test_unknown_roles_are_skipped(commands, queries, calls):
    queries.add_role("s_main", "Editors")

    assigned = await DefaultRoleAssigner(commands, queries).assign_defaults(
        "s_main", "u_1", "Ghosts;Editors"
    )

    assert assigned == ["Editors"]
    assert [c for c in calls if c[0] == "add_user_to_role"] == [("add_user_to_role", "r_editors", "u_1")]


async def test_role_without_id_is_skipped(commands, queries, calls):
    queries.add_role("s_main", "Admins", role_id="")

    assert await DefaultRoleAssigner(commands, queries).assign_defaults("s_main", "u_1", "Admins") == []
    assert calls == [("fetch_role", "s_main", "Admins")]


async def test_cancellation_stops_before_any_lookup(commands, queries, calls):
    queries.add_role("s_main", "Admins")
    cancel = CancellationToken()
    cancel.cancel()

    with pytest.raises(OperationCancelledError):
        await DefaultRoleAssigner(commands, queries).assign_defaults("s_main", "u_1", "Admins", cancel)
    assert calls == []
