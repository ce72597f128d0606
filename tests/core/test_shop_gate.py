"""Shop gate tests"""

from guildquest.core.character.models import Character
from guildquest.core.effect.models import Effect, EffectRestrictions
from guildquest.core.errors import ErrorKind
from guildquest.core.shop.gate import can_purchase, check_purchase, is_shop_blocked
from guildquest.core.shop.models import Cost, Denomination, ShopItem


def _blocker(duration=2) -> Effect:
    return Effect(
        effect_id="effect_ban",
        name="No allowance",
        duration=duration,
        restrictions=EffectRestrictions(shop_blocked=True),
    )


def _item(amount=5, denomination=Denomination.SILVER, stock=None) -> ShopItem:
    return ShopItem(
        item_id="item_001",
        guild_id="guild_001",
        name="30 min of games",
        cost=Cost(denomination, amount),
        stock=stock,
    )


def _kinds(errors):
    return [e.kind for e in errors]


class TestIsShopBlocked:
    def test_no_effects(self):
        assert is_shop_blocked([]) is False

    def test_active_blocker(self):
        assert is_shop_blocked([_blocker()]) is True

    def test_expired_blocker_does_not_block(self):
        assert is_shop_blocked([_blocker(duration=0)]) is False

    def test_non_blocking_effect(self):
        assert is_shop_blocked([Effect(effect_id="e", duration=3)]) is False


class TestCheckPurchase:
    def test_allowed(self):
        character = Character("char_001", silver=5)
        assert check_purchase(character, _item()) == []
        assert can_purchase(character, _item())

    def test_blocked(self):
        character = Character("char_001", silver=50, active_effects=[_blocker()])
        assert _kinds(check_purchase(character, _item())) == [ErrorKind.SHOP_BLOCKED]

    def test_no_cross_denomination(self):
        character = Character("char_001", gold=100, silver=4)
        assert _kinds(check_purchase(character, _item())) == [
            ErrorKind.INSUFFICIENT_FUNDS
        ]

    def test_quantity_multiplies_cost(self):
        character = Character("char_001", silver=9)
        errors = check_purchase(character, _item(), quantity=2)
        assert _kinds(errors) == [ErrorKind.INSUFFICIENT_FUNDS]

    def test_out_of_stock(self):
        character = Character("char_001", silver=50)
        errors = check_purchase(character, _item(stock=1), quantity=2)
        assert _kinds(errors) == [ErrorKind.OUT_OF_STOCK]

    def test_checks_are_independent(self):
        character = Character("char_001", silver=0, active_effects=[_blocker()])
        errors = check_purchase(character, _item(stock=0))
        assert _kinds(errors) == [
            ErrorKind.SHOP_BLOCKED,
            ErrorKind.INSUFFICIENT_FUNDS,
            ErrorKind.OUT_OF_STOCK,
        ]

    def test_invalid_quantity(self):
        character = Character("char_001", silver=50)
        assert _kinds(check_purchase(character, _item(), quantity=0)) == [
            ErrorKind.INVALID_QUANTITY
        ]
