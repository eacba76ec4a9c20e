"""Parser for the horse race-info page (summary, races, registrations)."""

import logging
import re
from datetime import date

from bs4 import BeautifulSoup, Tag

from stablesync.exceptions import DateParseFailure
from stablesync.fetchers.base import (
    HorseSummary,
    PageKind,
    PedigreeInfo,
    RaceHistoryItem,
    RacePage,
    RegistrationItem,
)
from stablesync.models.registration import RegistrationType
from stablesync.parsers.common import (
    ColumnRule,
    cell_at,
    cell_text,
    clean_text,
    find_table,
    header_cells,
    make_soup,
    map_headers,
    normalize_header,
    parse_float,
    parse_int,
    parse_tr_date,
    parse_tr_number,
    position_from_row,
    query_param,
)

logger = logging.getLogger(__name__)

SOURCE_ORIGIN = "https://www.tjk.org"

MIN_RACE_ROW_CELLS = 10
MIN_STATS_ROW_CELLS = 7

# Order matters: a header is assigned to the first rule it matches.
RACE_COLUMN_RULES = (
    ColumnRule("date", ("tarih", "date")),
    ColumnRule("city", ("şehir", "sehir", "city")),
    ColumnRule("distance", ("msf", "mesafe", "distance")),
    ColumnRule("surface", ("pist", "surface")),
    ColumnRule("finish_time", ("derece",)),
    ColumnRule("weight", ("sıklet", "siklet", "weight")),
    ColumnRule("jockey", ("jokey", "jockey")),
    ColumnRule("race", ("koşu",), excludes=("tip", "no")),
    ColumnRule(
        "race_type",
        ("kcins", "k.cins", "koşu tipi", "race type"),
        excludes=("yaş", "age"),
    ),
    ColumnRule("trainer", ("antrenör", "trainer", "ant.")),
    ColumnRule("handicap", ("hp", "handikap")),
    ColumnRule("prize", ("ikramiye", "prize")),
    ColumnRule("video", ("video", "s20")),
    ColumnRule("photo", ("foto", "photo")),
)

# Layout of the page when headers cannot be matched
RACE_DEFAULT_COLUMNS = {
    "date": 0,
    "city": 1,
    "distance": 2,
    "surface": 3,
    "weight": 6,
    "jockey": 7,
    "race": 10,
    "race_type": 11,
    "trainer": 12,
    "handicap": 13,
    "prize": 14,
    "video": 15,
    "photo": 16,
}

STATS_ROW_FIELDS = {
    "Çim": ("turf_races", "turf_firsts", "turf_earnings"),
    "Kum": ("dirt_races", "dirt_firsts", "dirt_earnings"),
    "Sentetik": ("synthetic_races", "synthetic_firsts", "synthetic_earnings"),
}

SUMMARY_PATTERNS = {
    "prize_money": re.compile(r"İkramiye\s+([\d.,]+)\s*t", re.IGNORECASE),
    "owner_premium": re.compile(r"At\s+Sahibi\s+Primi\s+([\d.,]+)\s*t", re.IGNORECASE),
    "breeder_premium": re.compile(r"Yetiştiricilik\s+Primi\s+([\d.,]+)\s*t", re.IGNORECASE),
    "total_earnings": re.compile(r"Kazanç\s+([\d.,]+)\s*t", re.IGNORECASE),
}
HANDICAP_PATTERN = re.compile(r"Handikap\s+P\.?\s*(\d+)", re.IGNORECASE)

RACE_LABEL_PATTERN = re.compile(r"(\d+)\s*[-–]\s*(.+)")
AGE_PATTERN = re.compile(r"^\d+\s*[+\-]?\s*[a-zı]?\s*(yaş|yıl|year)?$", re.IGNORECASE)


def surface_label(text: str) -> str | None:
    """Map track text such as ``Ç:Normal 3.3`` to Çim, Kum or Sentetik."""
    if "Ç" in text:
        return "Çim"
    if "K" in text:
        return "Kum"
    if "S" in text:
        return "Sentetik"
    return None


def registration_type(jockey_text: str) -> str | None:
    """
    Classify an upcoming-race row by its jockey cell.

    ``Kayıt`` means registered with no jockey yet; a jockey name means
    declared. Withdrawn entries (``Kayıt Koşmaz``, ``Deklare Koşmaz``) and
    rows with no status return None.
    """
    # "KAYIT" lowers to "kayit" and "Kayıt" to "kayıt"
    text = normalize_header(jockey_text).replace("ı", "i")
    if not text or "koşmaz" in text:
        return None
    if text.startswith("kayit"):
        return RegistrationType.KAYIT.value
    return RegistrationType.DEKLARE.value


def parse_summary(soup: BeautifulSoup, race_table: Tag | None = None) -> HorseSummary:
    """Statistics rows and headline amounts shown above the race table."""
    summary = HorseSummary()
    body_text = clean_text(soup.get_text(" "))

    match = HANDICAP_PATTERN.search(body_text)
    if match:
        summary.handicap_points = int(match.group(1))
    for field_name, pattern in SUMMARY_PATTERNS.items():
        match = pattern.search(body_text)
        if match:
            setattr(summary, field_name, parse_tr_number(match.group(1)))

    for table in soup.find_all("table"):
        if table is race_table:
            continue
        for row in table.find_all("tr"):
            cells = row.find_all("td")
            if len(cells) < MIN_STATS_ROW_CELLS:
                continue
            label = clean_text(cells[0].get_text(" "))
            counts = [parse_int(clean_text(c.get_text(" "))) or 0 for c in cells[1:7]]
            earnings = parse_tr_number(clean_text(cells[7].get_text(" "))) if len(cells) > 7 else None

            if label == "TOPLAM":
                (
                    summary.total_races,
                    summary.first_places,
                    summary.second_places,
                    summary.third_places,
                    summary.fourth_places,
                    summary.fifth_places,
                ) = counts
            elif label in STATS_ROW_FIELDS:
                races_field, firsts_field, earnings_field = STATS_ROW_FIELDS[label]
                setattr(summary, races_field, counts[0])
                setattr(summary, firsts_field, counts[1])
                setattr(summary, earnings_field, earnings)

    return summary


def parse_parents(soup: BeautifulSoup) -> PedigreeInfo:
    """Sire and dam from the ``Baba`` / ``Anne`` key-value spans."""
    slots: dict[str, str] = {}
    for key_span in soup.select("span.key"):
        key = clean_text(key_span.get_text())
        value = key_span.find_next_sibling()
        if value is None or "value" not in (value.get("class") or []):
            continue
        link = value.find("a")
        if link is None:
            continue
        name = clean_text(link.get_text(" "))
        if key == "Baba" and name:
            slots["sire_name"] = name
        elif key == "Anne" and name:
            # Dam is shown as "DAM / DAM'S SIRE"
            slots["dam_name"] = name.split("/")[0].strip()
    return PedigreeInfo(slots=slots)


def _race_type(cells: list[Tag], columns: dict[str, int]) -> str | None:
    text = cell_text(cell_at(cells, columns.get("race_type")))
    if text and re.search(r"[A-ZÇĞİÖŞÜ]", text) and not AGE_PATTERN.match(text):
        return text
    return None


def _race_label(text: str) -> tuple[int | None, str | None]:
    """Split ``"5 - GOLD GUARD"`` into race number and name."""
    if not text:
        return None, None
    match = RACE_LABEL_PATTERN.search(text)
    if match:
        return int(match.group(1)), match.group(2).strip()
    if text.isdigit():
        return int(text), None
    return None, text


def _link_href(cell: Tag | None) -> str | None:
    if cell is None:
        return None
    link = cell.find("a")
    return link.get("href") if link is not None else None


def _link_text(cell: Tag | None) -> str | None:
    if cell is None:
        return None
    link = cell.find("a")
    if link is None:
        return None
    return clean_text(link.get_text(" ")) or None


def _race_row(
    cells: list[Tag],
    headers: list[str],
    columns: dict[str, int],
    race_date: date,
) -> RaceHistoryItem:
    texts = [cell_text(c) for c in cells]
    surface_text = cell_text(cell_at(cells, columns.get("surface")))
    race_number, race_name = _race_label(cell_text(cell_at(cells, columns.get("race"))))

    jockey_cell = cell_at(cells, columns.get("jockey"))
    trainer_cell = cell_at(cells, columns.get("trainer"))

    handicap = parse_int(cell_text(cell_at(cells, columns.get("handicap"))))
    if handicap is not None and handicap > 200:
        handicap = None

    video_url = _link_href(cell_at(cells, columns.get("video")))
    if video_url and not video_url.startswith("http"):
        video_url = f"{SOURCE_ORIGIN}{video_url}"

    photo_url = None
    photo_cell = cell_at(cells, columns.get("photo"))
    if photo_cell is not None:
        img = photo_cell.find("img")
        photo_url = img.get("src") if img is not None else None

    return RaceHistoryItem(
        race_date=race_date,
        city=cell_text(cell_at(cells, columns.get("city"))) or None,
        distance=parse_int(cell_text(cell_at(cells, columns.get("distance")))),
        surface=surface_label(surface_text) if surface_text else None,
        surface_type=surface_text or None,
        position=position_from_row(headers, texts),
        finish_time=cell_text(cell_at(cells, columns.get("finish_time"))) or None,
        weight=parse_float(cell_text(cell_at(cells, columns.get("weight")))),
        jockey_name=_link_text(jockey_cell),
        jockey_id=query_param(_link_href(jockey_cell), "QueryParameter_JokeyId"),
        race_number=race_number,
        race_name=race_name,
        race_type=_race_type(cells, columns),
        trainer_name=_link_text(trainer_cell),
        trainer_id=query_param(_link_href(trainer_cell), "QueryParameter_AntrenorId"),
        handicap_points=handicap,
        prize_money=parse_tr_number(cell_text(cell_at(cells, columns.get("prize")))),
        video_url=video_url,
        photo_url=photo_url,
    )


def _registration_row(cells: list[Tag], columns: dict[str, int], race_date: date) -> RegistrationItem | None:
    jockey_cell = cell_at(cells, columns.get("jockey"))
    entry_type = registration_type(cell_text(jockey_cell))
    if entry_type is None:
        return None

    jockey_name = jockey_id = None
    if entry_type == RegistrationType.DEKLARE.value:
        jockey_name = cell_text(jockey_cell) or None
        jockey_id = query_param(_link_href(jockey_cell), "QueryParameter_JokeyId")

    surface_text = cell_text(cell_at(cells, columns.get("surface")))
    return RegistrationItem(
        race_date=race_date,
        type=entry_type,
        city=cell_text(cell_at(cells, columns.get("city"))) or None,
        distance=parse_int(cell_text(cell_at(cells, columns.get("distance")))),
        surface=surface_label(surface_text) if surface_text else None,
        surface_type=surface_text or None,
        race_type=_race_type(cells, columns),
        jockey_name=jockey_name,
        jockey_id=jockey_id,
    )


def parse_race_page(html: str, today: date | None = None) -> RacePage:
    """
    Parse a horse race-info page.

    Rows dated before ``today`` are completed races. Rows dated today or
    later with no finish position are pending entries (registrations).

    Args:
        html: rendered page
        today: reference day for splitting races from registrations

    Returns:
        RacePage

    Raises:
        SchemaDrift: the race table is missing
    """
    today = today or date.today()
    soup = make_soup(html)

    race_table = find_table(soup, required=("Tarih", "Şehir", "Derece"), page_kind=PageKind.RACES.value)
    headers = header_cells(race_table)
    columns = map_headers(headers, RACE_COLUMN_RULES, RACE_DEFAULT_COLUMNS)

    races: list[RaceHistoryItem] = []
    registrations: list[RegistrationItem] = []
    skipped = 0

    for row in race_table.find_all("tr"):
        cells = row.find_all("td")
        if len(cells) < MIN_RACE_ROW_CELLS:
            continue
        first = clean_text(cells[0].get_text(" "))
        if not first or first == "Tarih" or "Toplam" in first:
            continue

        try:
            race_date = parse_tr_date(cell_text(cell_at(cells, columns.get("date"))))
        except DateParseFailure as e:
            logger.debug(f"Skipping race row: {e}")
            skipped += 1
            continue

        item = _race_row(cells, headers, columns, race_date)
        if race_date >= today and item.position is None:
            registration = _registration_row(cells, columns, race_date)
            if registration is not None:
                registrations.append(registration)
            continue
        races.append(item)

    if skipped:
        logger.info(f"Skipped {skipped} race rows with unreadable dates")

    return RacePage(
        summary=parse_summary(soup, race_table),
        races=races,
        registrations=registrations,
        pedigree=parse_parents(soup),
    )
