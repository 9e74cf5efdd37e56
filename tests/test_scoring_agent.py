# tests/test_scoring_agent.py
from agents.scoring_agent import calculate_scores, collect_ctas, weighted_total
from agents.scoring_rules import DEFAULT_RULES
from models.page_models import ButtonItem, Headings, ImageItem, LinkItem


def test_good_page_scores(good_page):
    result = calculate_scores(good_page)
    s = result.scores

    assert (s.content, s.layout, s.cta, s.accessibility) == (90, 90, 100, 100)
    assert s.total == 95
    assert result.flags.active() == []
    assert result.details.cta.cta_examples == ["Get started now", "Start free trial"]


def test_bare_page_scores_and_flags(bare_page):
    result = calculate_scores(bare_page)
    s = result.scores

    assert s.content <= 45
    assert s.accessibility <= 45
    assert s.layout == 0
    assert s.cta == 0
    assert not result.details.layout.single_h1
    assert result.details.layout.no_h1

    flags = result.flags
    assert flags.no_h1
    assert flags.no_primary_cta
    assert flags.no_meta_description
    assert flags.small_font
    # 画像が無いので alt 欠落とはみなさない
    assert not flags.missing_alt_text
    assert result.details.accessibility.missing_alt_percentage is None


def test_scores_are_bounded_and_total_is_weighted(good_page, bare_page):
    for page in (good_page, bare_page):
        s = calculate_scores(page).scores
        for value in (s.content, s.layout, s.cta, s.accessibility, s.total):
            assert 0 <= value <= 100
        assert s.total == weighted_total(s.content, s.layout, s.cta, s.accessibility)


def test_weighted_total_rounds_half_up():
    # 0.30 * 55 + 0.25 * 50 + 0.25 * 50 + 0.20 * 50 = 51.5
    assert weighted_total(55, 50, 50, 50) == 52
    assert weighted_total(100, 100, 100, 100) == 100
    assert weighted_total(0, 0, 0, 0) == 0


def test_scoring_is_deterministic(good_page):
    assert calculate_scores(good_page) == calculate_scores(good_page)


def test_too_many_ctas(good_page):
    buttons = [ButtonItem(text=f"Buy plan {i}", type="button") for i in range(6)]
    page = good_page.model_copy(update={"buttons": buttons})

    result = calculate_scores(page)

    assert result.flags.too_many_ctas
    assert result.details.cta.too_many_competing_ctas
    assert result.details.layout.too_many_ctas
    assert result.scores.cta < calculate_scores(good_page).scores.cta


def test_placeholder_text_penalty(good_page):
    page = good_page.model_copy(update={"paragraphs": ["Lorem ipsum dolor sit amet, consectetur.", *good_page.paragraphs]})

    result = calculate_scores(page)

    assert result.flags.placeholder_text_detected
    assert result.scores.content == calculate_scores(good_page).scores.content - 10


def test_multiple_h1(good_page):
    page = good_page.model_copy(update={"headings": Headings(h1=["One", "Two"], h2=["Sub"])})

    result = calculate_scores(page)

    assert result.flags.multiple_h1
    assert result.details.layout.multiple_h1
    assert not result.details.layout.single_h1


def test_missing_alt_percentage_rounds_half_up(good_page):
    images = [ImageItem(src=f"/{i}.png", alt="ok" if i == 0 else "") for i in range(8)]
    page = good_page.model_copy(update={"images": images})

    details = calculate_scores(page).details.accessibility

    # 7/8 = 87.5%
    assert details.missing_alt_percentage == 88
    assert calculate_scores(page).flags.missing_alt_text


def test_links_count_as_cta_only_with_action_verb(bare_page):
    page = bare_page.model_copy(update={"links": [LinkItem(text="Daftar sekarang", href="/"), LinkItem(text="Blog", href="/blog")]})

    assert collect_ctas(page, DEFAULT_RULES) == [("Daftar sekarang", "link")]


def test_extended_rules_add_verbs(bare_page):
    page = bare_page.model_copy(update={"links": [LinkItem(text="Pesan kamar", href="/book")]})
    rules = DEFAULT_RULES.extended(action_verbs=["Pesan"])

    assert calculate_scores(page).flags.no_primary_cta
    assert not calculate_scores(page, rules).flags.no_primary_cta
    # 元のルールは変わらない
    assert not DEFAULT_RULES.has_action_verb("pesan")
