"""Tests for the race-info page parser."""

from datetime import date

import pytest

from stablesync.exceptions import SchemaDrift
from stablesync.parsers.races import parse_race_page, registration_type, surface_label

from tests.fixtures.html import (
    RACE_HEADERS,
    empty_page_html,
    jockey_link,
    race_page_html,
    race_row,
    registration_row,
)

TODAY = date(2024, 6, 1)


class TestParseRacePage:
    """Tests for parse_race_page."""

    def test_parses_race_row(self):
        """A completed race row is parsed field by field."""
        page = parse_race_page(race_page_html([race_row()]), today=TODAY)

        assert len(page.races) == 1
        race = page.races[0]
        assert race.race_date == date(2024, 5, 12)
        assert race.city == "İstanbul"
        assert race.distance == 1400
        assert race.surface == "Çim"
        assert race.surface_type == "Ç:Normal 3.3"
        assert race.position == 1
        assert race.finish_time == "1.25.97"
        assert race.weight == 57.0
        assert race.jockey_name == "AHMET ÇELİK"
        assert race.jockey_id == "501"
        assert race.race_number == 5
        assert race.race_name == "ŞARTLI 3"
        assert race.race_type == "ŞARTLI 3"
        assert race.trainer_name == "MEHMET YILMAZ"
        assert race.trainer_id == "77"
        assert race.handicap_points == 62
        assert race.prize_money == 250000.0
        assert race.video_url == "https://www.tjk.org/TR/YarisSever/Video/123"
        assert race.photo_url == "https://medya.tjk.org/foto/123.jpg"

    def test_position_not_confused_with_time(self):
        """S=7 next to Derece=1.33.94 gives position 7."""
        page = parse_race_page(
            race_page_html([race_row(position="7", time="1.33.94")]),
            today=TODAY,
        )

        assert page.races[0].position == 7
        assert page.races[0].finish_time == "1.33.94"

    def test_reordered_columns(self):
        """Columns are found by header even when the source reorders them."""
        headers = list(RACE_HEADERS)
        headers[1], headers[2] = headers[2], headers[1]  # Msf before Şehir
        row = race_row(city="1400", distance="İstanbul")

        page = parse_race_page(race_page_html([row], headers=headers), today=TODAY)

        assert page.races[0].city == "İstanbul"
        assert page.races[0].distance == 1400

    def test_bad_date_skips_only_that_row(self):
        rows = [race_row(race_date="12.05.2024"), race_row(race_date="bilinmiyor"), race_row(race_date="20.04.2024")]

        page = parse_race_page(race_page_html(rows), today=TODAY)

        assert [r.race_date for r in page.races] == [date(2024, 5, 12), date(2024, 4, 20)]

    def test_short_rows_are_ignored(self):
        rows = [race_row(), "<tr><td>12.05.2024</td><td>Toplam</td></tr>"]

        page = parse_race_page(race_page_html(rows), today=TODAY)

        assert len(page.races) == 1

    def test_registrations_split_from_races(self):
        """Future rows without a position are pending entries."""
        rows = [
            race_row(),
            registration_row(race_date="05.06.2024", jockey="Kayıt"),
            registration_row(race_date="08.06.2024", city="İzmir", jockey=jockey_link("HALİS KARATAŞ", "9")),
        ]

        page = parse_race_page(race_page_html(rows), today=TODAY)

        assert len(page.races) == 1
        assert [(r.type, r.city) for r in page.registrations] == [("KAYIT", "Ankara"), ("DEKLARE", "İzmir")]
        declared = page.registrations[1]
        assert declared.jockey_name == "HALİS KARATAŞ"
        assert declared.jockey_id == "9"
        assert page.registrations[0].jockey_name is None

    def test_withdrawn_entries_are_skipped(self):
        rows = [
            registration_row(jockey="Kayıt Koşmaz"),
            registration_row(jockey="Deklare Koşmaz"),
            registration_row(jockey=""),
        ]

        page = parse_race_page(race_page_html(rows), today=TODAY)

        assert page.registrations == []
        assert page.races == []

    def test_summary(self):
        page = parse_race_page(race_page_html([race_row()]), today=TODAY)
        summary = page.summary

        assert summary.handicap_points == 62
        assert summary.prize_money == 250000.0
        assert summary.owner_premium == 30000.5
        assert summary.breeder_premium == 12500.0
        assert summary.total_earnings == 292500.5
        assert summary.total_races == 12
        assert summary.first_places == 3
        assert summary.fourth_places == 1
        assert summary.turf_races == 8
        assert summary.turf_earnings == 500000.0
        assert summary.dirt_firsts == 1
        assert summary.synthetic_races is None

    def test_parents(self):
        """Dam name is cut at the '/' separator."""
        page = parse_race_page(race_page_html([race_row()]), today=TODAY)

        assert page.pedigree.slots == {"sire_name": "SIRE OF TEST", "dam_name": "DAM OF TEST"}

    def test_no_rows_is_valid_empty_page(self):
        page = parse_race_page(race_page_html([]), today=TODAY)

        assert page.races == []
        assert page.registrations == []

    def test_missing_table_raises_schema_drift(self):
        with pytest.raises(SchemaDrift):
            parse_race_page(empty_page_html(), today=TODAY)


class TestHelpers:
    """Tests for race page cell helpers."""

    @pytest.mark.parametrize(
        "text,expected",
        [("Ç:Normal 3.3", "Çim"), ("K:Normal", "Kum"), ("S:Islak", "Sentetik"), ("?", None)],
    )
    def test_surface_label(self, text, expected):
        assert surface_label(text) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Kayıt", "KAYIT"),
            ("KAYIT", "KAYIT"),
            ("kayit", "KAYIT"),
            ("AHMET ÇELİK", "DEKLARE"),
            ("Kayıt Koşmaz", None),
            ("Deklare Koşmaz", None),
            ("KAYIT KOŞMAZ", None),
            ("", None),
        ],
    )
    def test_registration_type(self, text, expected):
        assert registration_type(text) == expected
