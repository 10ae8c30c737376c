"""Tests for readlater.frontmatter: parsing, strict validation, DocumentMeta, header rewrite."""

import unittest
from datetime import datetime, timezone

from readlater.errors import MalformedHeaderError
from readlater.frontmatter import (
    FrontmatterSyntaxError,
    parse_frontmatter,
    read_document_meta,
    render_frontmatter,
    split_frontmatter_and_body,
    update_frontmatter,
)

UTC = timezone.utc

DOC = """---
title: Tech
feeds:
  - https://a.test/feed
  - "https://b.test/rss"
  - https://a.test/feed
synced: 2024-01-01T10:00
---
# Tech
- [ ] [Existing](https://a.test/1) [site:: a.test] ➕ 2024-01-01
"""


class ParseFrontmatterTests(unittest.TestCase):
    def test_scalars_and_block_lists(self) -> None:
        data = parse_frontmatter("a: 1\nb: true\nc: \"x: y\"\nd:\n  - one\n  - 'two'\ne: []\nf: null")
        self.assertEqual(data, {"a": 1, "b": True, "c": "x: y", "d": ["one", "two"], "e": [], "f": None})

    def test_flow_list(self) -> None:
        self.assertEqual(parse_frontmatter("feeds: [https://a.test/feed, https://b.test/rss]")["feeds"],
                         ["https://a.test/feed", "https://b.test/rss"])

    def test_lenient_mode_skips_unknown_lines(self) -> None:
        self.assertEqual(parse_frontmatter("a: 1\nnot a mapping\nmeta:\n  owner: me\nb: 2"), {"a": 1, "meta": [], "b": 2})

    def test_strict_mode_rejects_unsupported_lines(self) -> None:
        for text in (
            "a: 1\nnot a mapping",
            "- orphan item",
            "parent:\n  nested: value",
            'title: "unterminated',
            "feeds: [https://a.test/feed",
        ):
            with self.subTest(text=text):
                with self.assertRaises(FrontmatterSyntaxError):
                    parse_frontmatter(text, strict=True)

    def test_split_returns_body_verbatim(self) -> None:
        data, body = split_frontmatter_and_body(DOC)
        self.assertEqual(data["title"], "Tech")
        self.assertTrue(body.startswith("# Tech\n"))

    def test_empty_block(self) -> None:
        self.assertEqual(split_frontmatter_and_body("---\n---\nbody"), ({}, "body"))

    def test_unclosed_block_is_an_error_only_when_strict(self) -> None:
        text = "---\nfeeds: []\n# no closing line\n"
        self.assertEqual(split_frontmatter_and_body(text), ({}, text))
        with self.assertRaises(FrontmatterSyntaxError):
            split_frontmatter_and_body(text, strict=True)


class RenderFrontmatterTests(unittest.TestCase):
    def test_keeps_key_order_and_quotes_strings(self) -> None:
        out = render_frontmatter({"title": "Tech", "feeds": ["https://a.test/feed"], "count": 2, "skip": None, "none": []})
        self.assertEqual(
            out,
            '---\ntitle: "Tech"\nfeeds:\n  - "https://a.test/feed"\ncount: 2\nnone: []\n---',
        )


class DocumentMetaTests(unittest.TestCase):
    def test_reads_feeds_and_watermark(self) -> None:
        meta = read_document_meta(DOC)
        self.assertEqual(meta.feeds, ("https://a.test/feed", "https://b.test/rss"))
        self.assertEqual(meta.synced, datetime(2024, 1, 1, 10, 0, tzinfo=UTC))
        self.assertEqual(meta.synced_key, "synced")
        self.assertTrue(meta.has_feeds)

    def test_no_header_returns_none(self) -> None:
        self.assertIsNone(read_document_meta("# Just a note\n"))

    def test_header_without_feeds(self) -> None:
        meta = read_document_meta("---\ntitle: x\n---\n")
        self.assertFalse(meta.has_feeds)
        self.assertIsNone(meta.synced)

    def test_single_feed_string_is_accepted(self) -> None:
        meta = read_document_meta("---\nfeeds: https://a.test/feed\n---\n")
        self.assertEqual(meta.feeds, ("https://a.test/feed",))

    def test_epoch_millisecond_watermark(self) -> None:
        meta = read_document_meta("---\nfeeds: []\nsynced: 1704067200000\n---\n")
        self.assertEqual(meta.synced, datetime(2024, 1, 1, tzinfo=UTC))

    def test_legacy_keys(self) -> None:
        meta = read_document_meta("---\nxml_feeds:\n  - https://a.test/feed\nxml_synced: 2024-01-01T10:00\n---\n")
        self.assertEqual(meta.feeds, ("https://a.test/feed",))
        self.assertEqual(meta.synced_key, "xml_synced")
        self.assertEqual(meta.synced, datetime(2024, 1, 1, 10, 0, tzinfo=UTC))

    def test_valid_yaml_the_writer_cannot_render_is_still_read(self) -> None:
        text = "---\nfeeds:\n  - https://a.test/feed\nmeta:\n  owner: me\nsummary: |\n  feeds: nope\n---\n# Body\n"
        meta = read_document_meta(text)
        self.assertEqual(meta.feeds, ("https://a.test/feed",))
        with self.assertRaises(MalformedHeaderError):
            update_frontmatter(text, lambda fm: None)

    def test_leading_byte_order_mark_is_ignored(self) -> None:
        meta = read_document_meta("\ufeff---\nfeeds:\n  - https://a.test/feed\n---\n")
        self.assertEqual(meta.feeds, ("https://a.test/feed",))

    def test_malformed_header_raises_with_path(self) -> None:
        with self.assertRaises(MalformedHeaderError) as ctx:
            read_document_meta("---\nfeeds:\n  - https://a.test/feed\n# never closed\n", path="read later/x.md")
        self.assertEqual(ctx.exception.path, "read later/x.md")


class UpdateFrontmatterTests(unittest.TestCase):
    def test_sets_key_and_keeps_body(self) -> None:
        out = update_frontmatter(DOC, lambda fm: fm.__setitem__("synced", "2024-01-02T12:00"))
        data, body = split_frontmatter_and_body(out)
        self.assertEqual(data["synced"], "2024-01-02T12:00")
        self.assertEqual(list(data), ["title", "feeds", "synced"])
        self.assertEqual(body, DOC.split("---\n", 2)[2])

    def test_document_without_header_gets_one(self) -> None:
        out = update_frontmatter("# Note\n", lambda fm: fm.__setitem__("synced", "2024-01-02T12:00"))
        self.assertEqual(out, '---\nsynced: "2024-01-02T12:00"\n---\n# Note\n')

    def test_byte_order_mark_is_kept_on_rewrite(self) -> None:
        out = update_frontmatter("\ufeff---\ntitle: x\n---\nbody\n", lambda fm: fm.__setitem__("synced", "2024-01-02T12:00"))
        self.assertEqual(out, '\ufeff---\ntitle: "x"\nsynced: "2024-01-02T12:00"\n---\nbody\n')

    def test_malformed_header_raises(self) -> None:
        with self.assertRaises(MalformedHeaderError):
            update_frontmatter("---\nfeeds: [unterminated\n---\n", lambda fm: None, path="x.md")


if __name__ == "__main__":
    unittest.main()
