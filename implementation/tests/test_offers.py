import pytest

from tycoon.catalog import business_def
from tycoon.errors import UnknownDefinitionError
from tycoon.offers import available_upgrades, buy_upgrade, ensure_upgrade_offers, process_upgrade_offers, upgrade_cost
from tycoon.upgrades import default_manager

from conftest import NOW, with_business


def _ten_lemonades(fresh):
    state = with_business(fresh, "lemonade", count=10)
    state.upgrade_offers = []
    return state


def test_unlocks_follow_counts_and_earnings(fresh):
    assert available_upgrades(fresh) == []
    state = _ten_lemonades(fresh)
    assert [u.id for u in available_upgrades(state)] == ["lemonade-promo"]
    state.total_earned = 600.0
    assert {u.id for u in available_upgrades(state)} == {"lemonade-promo", "billboard-blitz"}


def test_cost_never_drops_below_list_price(fresh):
    state = _ten_lemonades(fresh)
    promo = default_manager().get("lemonade-promo")
    assert upgrade_cost(state, promo) == 300.0
    state.businesses["lemonade"].count = 1000
    assert upgrade_cost(state, promo) > 300.0


def test_offers_fill_and_rotate(fresh):
    state = _ten_lemonades(fresh)
    state.total_earned = 5000.0
    offered = ensure_upgrade_offers(state, NOW)
    assert len(offered.upgrade_offers) == 3
    assert len(set(offered.upgrade_offers)) == 3
    assert ensure_upgrade_offers(offered, NOW) is offered
    assert process_upgrade_offers(offered, NOW + 1000) is offered
    rotated = process_upgrade_offers(offered, NOW + 90_000)
    assert rotated.last_offer_refresh_at == NOW + 90_000
    assert rotated.rng_seed != offered.rng_seed


def test_buy_upgrade(fresh):
    state = _ten_lemonades(fresh)
    assert buy_upgrade(state, "lemonade-promo", NOW) is state
    state.cash = 1000.0
    bought = buy_upgrade(state, "lemonade-promo", NOW)
    assert bought.cash == pytest.approx(700.0)
    assert bought.purchased_upgrades == ["lemonade-promo"]
    assert "lemonade-promo" not in bought.upgrade_offers
    assert buy_upgrade(bought, "lemonade-promo", NOW) is bought
    assert buy_upgrade(bought, "bulk-supplier", NOW) is bought


def test_unknown_definition_lookup_raises():
    with pytest.raises(UnknownDefinitionError) as info:
        business_def("spaceport")
    assert info.value.def_id == "spaceport"
    assert isinstance(info.value, KeyError)
