from slidem.flags import FlagSet, SlidemFlag, has_flag


def test_bit_positions_are_fixed():
    assert SlidemFlag.NO_FACEPLATE_CURRENT == 1
    assert SlidemFlag.BEYOND_VALID_QDLATITUDE == 1 << 6
    assert SlidemFlag.LP_INPUTS_INVALID == 1 << 11
    assert SlidemFlag.POST_PROCESSING_ERROR == 1 << 16
    assert SlidemFlag.MAG_INPUT_INVALID == 1 << 17


class TestFlagSet:
    def test_with_all_sets_every_mask(self):
        flags = FlagSet().with_all(SlidemFlag.NO_FACEPLATE_CURRENT)
        assert flags.to_tuple() == (1, 1, 1)

    def test_updates_return_new_instances(self):
        base = FlagSet()
        updated = base.with_drift(SlidemFlag.POST_PROCESSING_ERROR)
        assert base.drift == 0
        assert updated.drift == SlidemFlag.POST_PROCESSING_ERROR
        assert updated.mass == 0 and updated.density == 0

    def test_merge_is_bitwise_or(self):
        a = FlagSet(mass=1, drift=2, density=4)
        b = FlagSet(mass=2, drift=2, density=1)
        assert a.merge(b).to_tuple() == (3, 2, 5)

    def test_without_drift_clears_only_drift(self):
        bit = SlidemFlag.POST_PROCESSING_ERROR
        flags = FlagSet().with_all(bit | SlidemFlag.ESTIMATE_TOO_LARGE)
        cleared = flags.without_drift(bit)
        assert not has_flag(cleared.drift, bit)
        assert has_flag(cleared.drift, SlidemFlag.ESTIMATE_TOO_LARGE)
        assert has_flag(cleared.mass, bit)
        assert has_flag(cleared.density, bit)
        assert 0 <= cleared.drift <= 0xFFFFFFFF


def test_has_flag_requires_all_bits():
    mask = int(SlidemFlag.LP_INPUTS_INVALID)
    assert has_flag(mask, SlidemFlag.LP_INPUTS_INVALID)
    assert not has_flag(
        mask, SlidemFlag.LP_INPUTS_INVALID | SlidemFlag.SPACECRAFT_POTENTIAL_TOO_POSITIVE
    )
