import logging

import pytest

from bimavault.convex_factory import (
    BabelOwnable,
    ConvexFactory,
    DepositTokenTemplate,
    OwnershipError,
)

CORE = bytes([7]) * 32
OTHER = bytes([9]) * 32


def make_factory():
    return ConvexFactory(CORE, DepositTokenTemplate())


def test_template_initialize():
    template = DepositTokenTemplate()
    template.initialize(4, CORE)
    assert template.pid == 4
    assert template.owner == CORE


def test_only_owner_accepts_owner_and_rejects_others():
    ownable = BabelOwnable(CORE, CORE)
    ownable.only_owner(CORE)
    with pytest.raises(OwnershipError) as info:
        ownable.only_owner(OTHER)
    assert info.value.code == 1
    assert info.value.caller == OTHER


def test_factory_owner_is_core():
    factory = make_factory()
    assert factory.babel_ownable.owner == CORE
    assert factory.babel_ownable.babel_core == CORE


def test_deploy_records_address():
    factory = make_factory()
    address = factory.deploy_new_instance(3, CORE)
    assert address == bytes(32)
    assert factory.get_deposit_token(3) == address


def test_deploy_rejects_non_owner():
    factory = make_factory()
    with pytest.raises(OwnershipError):
        factory.deploy_new_instance(3, OTHER)
    assert factory.get_deposit_token(3) is None
    assert factory.deployed_tokens == {}


def test_unknown_pid_is_none():
    factory = make_factory()
    factory.deploy_new_instance(1, CORE)
    assert factory.get_deposit_token(2) is None


def test_template_untouched_by_deploy():
    template = DepositTokenTemplate()
    factory = ConvexFactory(CORE, template)
    factory.deploy_new_instance(5, CORE)
    assert template.pid == 0
    assert template.owner == bytes(32)


def test_deploy_logs_event(caplog):
    factory = make_factory()
    with caplog.at_level(logging.INFO, logger="bimavault.convex_factory"):
        factory.deploy_new_instance(8, CORE)
    assert any("NewDeployment: pid: 8" in r.getMessage() for r in caplog.records)


def test_multiple_deployments_tracked():
    factory = make_factory()
    for pid in (1, 2, 3):
        factory.deploy_new_instance(pid, CORE)
    assert sorted(factory.deployed_tokens) == [1, 2, 3]