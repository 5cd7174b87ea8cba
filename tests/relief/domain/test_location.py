import pytest
from relief.stock.location import DEFAULT_PROVINCIAL_ID, Location, LocationType, provincial_id


class TestLocation:
    def test_provincial_uses_default_id(self):
        assert Location.provincial().id == DEFAULT_PROVINCIAL_ID
        assert Location.provincial().type == "provincial"

    def test_provincial_id_can_be_overridden(self, monkeypatch):
        monkeypatch.setenv("RELIEF_PROVINCIAL_ID", "prov-north")
        assert provincial_id() == "prov-north"
        assert Location.provincial().key == "provincial:prov-north"

    def test_shelter_id_is_coerced_to_string(self):
        assert Location.shelter(42).id == "42"

    def test_accepts_enum_member(self):
        assert Location(LocationType.SHELTER, "s1").type == "shelter"

    def test_equality_ignores_name(self):
        assert Location.shelter("s1", "School") == Location.shelter("s1", "Temple")
        assert Location.shelter("s1") != Location.provincial()

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            Location("warehouse", "w1")

    def test_missing_id_rejected(self):
        with pytest.raises(ValueError):
            Location.shelter("")

    def test_stock_key(self):
        assert Location.shelter("s1").stock_key("Rice") == "shelter:s1:Rice"

    def test_label_falls_back_to_key(self):
        assert str(Location.shelter("s1")) == "shelter:s1"
        assert str(Location.shelter("s1", "Wat Pho shelter")) == "Wat Pho shelter"
