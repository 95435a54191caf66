"""Tests for the shop-floor vocabulary: synonyms and station area families."""

import pytest

from qa_matrix.domain.vocabulary import SYNONYMS, area_family, expand_synonyms


class TestExpandSynonyms:
    def test_key_adds_variants(self):
        assert expand_synonyms(["bolt"]) == {"bolt", "bolts", "screw", "fastener"}

    def test_variant_adds_key_and_siblings(self):
        assert expand_synonyms(["lh"]) == {"lh", "left", "lhf", "lhr"}

    def test_unknown_token_kept_as_is(self):
        assert expand_synonyms(["grommet"]) == {"grommet"}

    def test_every_variant_reaches_its_key(self):
        for key, variants in SYNONYMS.items():
            for variant in variants:
                assert key in expand_synonyms([variant])


class TestAreaFamily:
    @pytest.mark.parametrize("station,family", [
        ("T30", "trim"),
        ("c80", "chassis"),
        ("  F40", "final"),
        ("P10", "paint"),
    ])
    def test_leading_letter(self, station, family):
        assert area_family(station) == family

    @pytest.mark.parametrize("station", ["", "   ", "X10", "80C"])
    def test_no_family(self, station):
        assert area_family(station) is None
