"""Tests for class page feature extraction."""

import logging

from bs4 import BeautifulSoup

from beyond_bridge.markup import parse_features
from beyond_bridge.markup.features import introduces_sub_choice, parse_level, parse_progression, section_description
from beyond_bridge.markup.nodes import flatten
from beyond_bridge.models import PLACEHOLDER_DESCRIPTION


def _table(*rows):
    body = "".join(f"<tr><td>{level}</td><td>{cell}</td></tr>" for level, cell in rows)
    return f"<table><tbody>{body}</tbody></table>"


class TestParseLevel:
    """Test level cell parsing."""

    def test_ordinal(self):
        assert parse_level("5th") == 5
        assert parse_level(" 11th ") == 11

    def test_default(self):
        assert parse_level("n/a") == 1
        assert parse_level("", default=3) == 3


class TestParseFeatures:
    """Test parse_features() on class page markup."""

    def test_fighter_page(self, fighter_page):
        """Every linked feature is extracted with its level."""
        features = parse_features(fighter_page)

        assert [(f.name, f.required_level) for f in features] == [
            ("Fighting Style", 1),
            ("Second Wind", 1),
            ("Action Surge", 2),
            ("Extra Attack", 5),
            ("Extra Attack", 11),
        ]

    def test_same_feature_at_two_levels(self, fighter_page):
        """A feature granted at two levels yields two features."""
        features = [f for f in parse_features(fighter_page) if f.name == "Extra Attack"]

        assert len(features) == 2
        assert {f.required_level for f in features} == {5, 11}
        assert all("attack twice" in f.description for f in features)

    def test_duplicate_link_in_row(self):
        """Repeating a link within one row yields a single feature."""
        html = _table(("3rd", '<a href="#Rage">Rage</a>, <a href="#Rage">Rage</a>')) + \
            '<h2 id="Rage">Rage</h2><p>In battle, you fight with primal ferocity.</p>'

        features = parse_features(html)

        assert len(features) == 1
        assert features[0].required_level == 3
        assert features[0].description == "<p>In battle, you fight with primal ferocity.</p>"

    def test_sub_choice_keeps_intro_only(self, fighter_page):
        """A section that offers sub-options keeps only its introduction."""
        style = next(f for f in parse_features(fighter_page) if f.name == "Fighting Style")

        assert style.description == "<p>You adopt a particular style of fighting as your specialty.</p>"
        assert "Archery" not in style.description

    def test_section_with_list(self, fighter_page):
        """All blocks of a plain section are kept."""
        surge = next(f for f in parse_features(fighter_page) if f.name == "Action Surge")

        assert surge.description.startswith("<p>You can push yourself")
        assert "<ul><li>Once per short rest.</li></ul>" in surge.description

    def test_missing_section_uses_placeholder(self):
        """A link whose target is not on the page gets the placeholder description."""
        features = parse_features(_table(("1st", '<a href="#Nowhere">Lost Feature</a>')))

        assert len(features) == 1
        assert features[0].description == PLACEHOLDER_DESCRIPTION.format(name="Lost Feature")

    def test_external_links_ignored(self):
        features = parse_features(_table(("1st", '<a href="/spells/fireball">Fireball</a>')))
        assert features == []

    def test_anchor_inside_heading(self):
        """An id on a span inside a heading resolves to the heading's section."""
        html = _table(("2nd", '<a href="#cunning">Cunning Action</a>')) + \
            '<h3><span id="cunning"></span>Cunning Action</h3><p>Bonus action dash.</p><h3>Other</h3>'

        features = parse_features(html)

        assert features[0].description == "<p>Bonus action dash.</p>"

    def test_anchor_on_paragraph(self):
        """An id on a paragraph takes the paragraph and the blocks after it."""
        html = _table(("1st", '<a href="#sneak">Sneak Attack</a>')) + \
            '<p id="sneak"><strong>Sneak Attack.</strong> Extra damage.</p><p>More.</p><h2>Next</h2><p>No.</p>'

        description = parse_features(html)[0].description

        assert description == '<p id="sneak"><strong>Sneak Attack.</strong> Extra damage.</p><p>More.</p>'

    def test_url_encoded_fragment(self):
        html = _table(("1st", '<a href="#Second%20Wind">Second Wind</a>')) + \
            '<h2 id="Second Wind">Second Wind</h2><p>Stamina.</p>'

        assert parse_features(html)[0].description == "<p>Stamina.</p>"

    def test_rows_without_tbody(self):
        html = "<table><tr><th>Level</th><th>Features</th></tr>" \
               '<tr><td>1st</td><td><a href="#A">Alpha</a></td></tr></table>'

        features = parse_features(html)

        assert [(f.name, f.required_level) for f in features] == [("Alpha", 1)]

    def test_no_table(self, caplog):
        """Markup without a table yields no features and a warning."""
        with caplog.at_level(logging.WARNING, logger="beyond-bridge"):
            assert parse_features("<p>Just prose.</p>") == []

        assert "No feature table" in caplog.text

    def test_accepts_parsed_tree(self, fighter_page):
        soup = BeautifulSoup(fighter_page, "html.parser")
        assert len(parse_features(soup)) == 5


class TestSectionDescription:
    """Test section description rules directly."""

    def test_single_sub_heading_is_not_a_choice(self):
        soup = BeautifulSoup("<h2>A</h2><p>x</p><h3>Only</h3><p>y</p>", "html.parser")
        nodes = flatten(soup)

        assert not introduces_sub_choice(nodes, 0)
        assert section_description(nodes, 0) == "<p>x</p><h3>Only</h3><p>y</p>"

    def test_low_rank_heading_never_a_choice(self):
        soup = BeautifulSoup("<h4>A</h4><p>x</p><h5>B</h5><h5>C</h5>", "html.parser")
        assert not introduces_sub_choice(flatten(soup), 0)


class TestParseProgression:
    """Test progression table parsing."""

    def test_fighter_progression(self, fighter_page):
        rows = parse_progression(fighter_page)

        assert [row.level for row in rows] == [1, 2, 5, 11]
        assert rows[0].columns["Proficiency Bonus"] == "+2"
        assert rows[3].columns["Proficiency Bonus"] == "+4"

    def test_no_table(self):
        assert parse_progression("") == []
