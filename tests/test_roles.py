from automart.core.roles import Capability, UserRole, capabilities_for, has_capability, home_path


def test_admin_has_every_capability():
    assert capabilities_for(UserRole.ADMIN) == frozenset(Capability)


def test_guest_can_only_browse():
    assert capabilities_for(UserRole.GUEST) == {Capability.BROWSE}


def test_seller_and_buyer_capabilities():
    assert has_capability("seller", Capability.MANAGE_LISTINGS)
    assert not has_capability("seller", Capability.MANAGE_USERS)
    assert has_capability("buyer", Capability.SAVE_FAVORITES)
    assert not has_capability("buyer", Capability.MANAGE_SHOWROOM)
    for role in ("buyer", "seller", "admin"):
        assert has_capability(role, Capability.SEND_MESSAGES)


def test_home_paths():
    assert home_path("seller") == "/seller/dashboard"
    assert home_path(UserRole.ADMIN) == "/admin/dashboard"
    assert home_path("guest") == "/"
