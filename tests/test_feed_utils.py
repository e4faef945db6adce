from datetime import datetime, timezone
from unittest import TestCase

from bs4 import BeautifulSoup

from feedlens.main.tools.feed_utils import (
    element_markup,
    element_text,
    html_to_text,
    parse_date,
    select_all,
    select_one,
    select_path,
)


class TestHtmlToText(TestCase):
    def test_paragraphs_are_space_joined(self) -> None:
        self.assertEqual(html_to_text("<p>Hello</p><p>World</p>"), "Hello World")

    def test_inline_markup_and_whitespace(self) -> None:
        html = "<p>  Breaking:\n <a href='x'>big</a>   news </p>\n<p></p><p>More</p>"
        self.assertEqual(html_to_text(html), "Breaking: big news More")

    def test_text_outside_paragraphs_is_dropped(self) -> None:
        self.assertEqual(html_to_text("<div>intro<p>Body</p></div>"), "Body")

    def test_plain_text_is_kept(self) -> None:
        self.assertEqual(html_to_text("Just  plain\ttext"), "Just plain text")

    def test_scripts_are_ignored(self) -> None:
        self.assertEqual(html_to_text("<script>alert(1)</script><p>Safe</p>"), "Safe")

    def test_empty(self) -> None:
        self.assertEqual(html_to_text(""), "")
        self.assertEqual(html_to_text(None), "")
        self.assertEqual(html_to_text("   "), "")


class TestParseDate(TestCase):
    def test_rfc822(self) -> None:
        self.assertEqual(
            parse_date("Tue, 10 Jun 2003 04:00:00 GMT"),
            datetime(2003, 6, 10, 4, 0, tzinfo=timezone.utc),
        )

    def test_rfc822_with_offset(self) -> None:
        self.assertEqual(
            parse_date("Mon, 01 Jan 2024 10:00:00 +0100"),
            datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        )

    def test_iso8601(self) -> None:
        self.assertEqual(
            parse_date("2024-01-01T12:30:00+02:00"),
            datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc),
        )

    def test_garbage_is_absent(self) -> None:
        for value in ("not-a-date", "", "   ", None):
            with self.subTest(value=value):
                self.assertIsNone(parse_date(value))


class TestSelectors(TestCase):
    DOC = (
        '<rss xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:atom="http://www.w3.org/2005/Atom">'
        "<channel>"
        '<atom:link href="https://example.com/self"/>'
        "<link>https://example.com/</link>"
        "<item><author><name> Ann </name></author><dc:creator>Dee</dc:creator></item>"
        "</channel></rss>"
    )

    def setUp(self) -> None:
        self.soup = BeautifulSoup(self.DOC, "xml")
        self.channel = self.soup.find("channel")

    def test_unprefixed_selector_prefers_plain_elements(self) -> None:
        links = select_all(self.channel, "link", recursive=False)
        self.assertEqual([element_text(link) for link in links], ["https://example.com/"])

    def test_unprefixed_selector_falls_back_to_prefixed(self) -> None:
        doc = '<rss xmlns:atom="http://www.w3.org/2005/Atom"><atom:link href="h"/></rss>'
        soup = BeautifulSoup(doc, "xml")
        link = select_one(soup, "link")
        self.assertIsNotNone(link)
        self.assertEqual(link.get("href"), "h")

    def test_exact_selector_skips_prefixed(self) -> None:
        doc = '<rss xmlns:atom="http://www.w3.org/2005/Atom"><atom:link href="h"/></rss>'
        soup = BeautifulSoup(doc, "xml")
        self.assertIsNone(select_one(soup, "link", exact=True))
        self.assertIsNone(select_path(soup.find("rss"), "link", exact=True))

    def test_prefixed_selector_filters_by_prefix(self) -> None:
        self.assertEqual(element_text(select_one(self.soup, "dc:creator")), "Dee")
        self.assertIsNone(select_one(self.soup, "atom:creator"))

    def test_select_path(self) -> None:
        item = self.soup.find("item")
        self.assertEqual(element_text(select_path(item, "author/name")), "Ann")
        self.assertIsNone(select_path(item, "author/email"))
        self.assertIsNone(select_path(item, "missing/name"))

    def test_element_text_of_missing_tag(self) -> None:
        self.assertEqual(element_text(None), "")


class TestElementMarkup(TestCase):
    def test_xhtml_children_are_kept_as_markup(self) -> None:
        soup = BeautifulSoup(
            '<content type="xhtml"><div><p>Hello</p><p>World</p></div></content>', "xml"
        )
        markup = element_markup(soup.find("content"))
        self.assertIn("<p>Hello</p>", markup)
        self.assertEqual(html_to_text(markup), "Hello World")

    def test_escaped_html_is_unescaped_text(self) -> None:
        soup = BeautifulSoup('<summary type="html">&lt;p&gt;Hi&lt;/p&gt;</summary>', "xml")
        self.assertEqual(element_markup(soup.find("summary")), "<p>Hi</p>")

    def test_missing_tag(self) -> None:
        self.assertEqual(element_markup(None), "")
