from __future__ import annotations

import pytest

from mailer_core import (
    ActionSpec,
    Composite,
    InvalidDefinitionError,
    Mailer,
    Router,
    Settings,
    compose,
    reset_default_router,
)


def _setter(key):
    def action(email, context):
        email[key] = True
        return email

    return action


def _record(calls, label):
    def action(email, context):
        calls.append((label, dict(context.options)))
        return email

    return action


def test_compose_applies_members_in_order_to_the_same_message():
    sender = Mailer(_setter("sent"))
    logger = Mailer(_setter("logged"))
    message = {}
    result = compose(sender, logger).send(message)
    assert result == {"sent": True, "logged": True}
    assert result is message


def test_compose_stops_on_cancellation():
    cancel = Mailer(lambda email, context: False)
    marker = Mailer(_setter("marked"))
    message = {}
    assert compose(cancel, marker).send(message) is False
    assert message == {}


def test_compose_propagates_none_unchanged():
    calls = []
    result = compose(Mailer(lambda email, context: None), _record(calls, "after")).send({})
    assert result is None
    assert calls == []


def test_empty_message_is_not_a_cancellation():
    calls = []
    result = compose(lambda email, context: {}, _record(calls, "next")).send({"drop": "me"})
    assert result == {}
    assert calls == [("next", {})]


def test_compose_flattens_nested_lists_and_wraps_plain_values():
    calls = []
    composed = compose(
        [_record(calls, "one"), [Mailer(_record(calls, "two"), {"b": 2})]],
        ActionSpec(_record(calls, "three"), {"c": 3}),
    )
    composed.send({})
    assert calls == [("one", {}), ("two", {"b": 2}), ("three", {"c": 3})]


def test_compose_accepts_objects_with_action_attribute():
    calls = []

    class Definition:
        action = staticmethod(_record(calls, "object"))
        options = {"o": 1}

    compose(Definition()).send({})
    assert calls == [("object", {"o": 1})]


def test_action_consumes_following_options_mapping():
    calls = []
    compose(_record(calls, "with-options"), {"domain": "example.com"}).send({})
    assert calls == [("with-options", {"domain": "example.com"})]


def test_members_keep_their_own_options_only():
    calls = []
    composed = compose(Mailer(_record(calls, "a"), {"a": 1}), Mailer(_record(calls, "b"), {"b": 2}))
    composed.send({}, {"outer": True})
    assert calls == [("a", {"a": 1}), ("b", {"b": 2})]


def test_single_member_compose_behaves_like_multi_member():
    calls = []
    single = compose(Mailer(_record(calls, "only"), {"a": 1}))
    assert isinstance(single, Composite)
    single.send({}, {"outer": True})
    assert calls == [("only", {"a": 1})]


def test_derived_member_options_are_computed_from_invocation_options():
    router = Router()
    calls = []
    router.route("deliver", _record(calls, "deliver"))
    composed = router.compose({"deliver": lambda options: {"to": options["recipient"]}})
    composed.send({}, {"recipient": "a@example.com"})
    assert calls == [("deliver", {"to": "a@example.com"})]


def test_extend_on_composite_keeps_members():
    router = Router()
    calls = []
    router.route("deliver", _record(calls, "deliver"))
    composed = router.compose({"deliver": lambda options: {"to": options["recipient"]}})
    extended = composed.extend({"recipient": "b@example.com"})
    assert isinstance(extended, Composite)
    assert extended.mailers == composed.mailers
    extended.send({})
    assert calls == [("deliver", {"to": "b@example.com"})]
    assert composed.options == {}


def test_compose_resolves_route_names_through_given_router():
    router = Router()
    calls = []
    composed = router.compose("later")
    router.route("later", _record(calls, "later"))
    composed.send({})
    assert [label for label, _ in calls] == ["later"]


def test_compose_rejects_unknown_definitions():
    with pytest.raises(InvalidDefinitionError):
        compose(42)
    with pytest.raises(InvalidDefinitionError):
        compose()
    with pytest.raises(InvalidDefinitionError):
        compose([])


def test_mapping_with_action_key_is_a_route_mapping():
    router = Router()
    calls = []
    router.route("action", _record(calls, "action-route"))
    composed = router.compose({"action": lambda options: {"to": options["recipient"]}})
    composed.send({}, {"recipient": "a@example.com"})
    assert calls == [("action-route", {"to": "a@example.com"})]


def test_compose_members_follow_default_router_settings():
    reset_default_router(Settings(deep_merge=True))
    try:
        composed = compose(lambda email, context: context.options, {"headers": {"X-A": "1"}})
        assert composed.mailers[0].deep_merge is True
        assert composed.deep_merge is True
    finally:
        reset_default_router(Settings())


def test_route_mapping_rejects_non_string_names():
    router = Router()
    with pytest.raises(InvalidDefinitionError):
        router.compose({1: {"a": 1}})
    with pytest.raises(InvalidDefinitionError):
        router.route("bad", {None: {}})


def test_composite_rejects_foreign_first_mailer():
    member = Mailer(_record([], "member"))
    stranger = Mailer(_record([], "stranger"))
    with pytest.raises(InvalidDefinitionError):
        Composite([member], first_mailer=stranger)
