from datetime import date
from pathlib import Path

from postkit.adapters.linting.rules import (
    BodyRule,
    ExcerptRule,
    FrontmatterRule,
    LinksRule,
    ReferencesRule,
    RequiredKeysRule,
    SchemaRule,
    SlugsRule,
    TagsRule,
    TimestampsRule,
)
from postkit.domain.models import ERROR, WARNING, MarkdownFile


def md(frontmatter=None, body="Body text.", *, has_frontmatter=True, error=None, name="post"):
    return MarkdownFile(
        path=Path(f"{name}.md"),
        slug=name,
        frontmatter=frontmatter or {},
        body=body,
        has_frontmatter=has_frontmatter,
        error=error,
    )


GOOD = {
    "title": "Title",
    "excerpt": "Short.",
    "category": {"name": "Git", "slug": "git"},
    "date": date(2024, 1, 1),
    "publishedAt": "2024-01-01T10:00:00Z",
    "updatedAt": "2024-02-01T10:00:00Z",
    "author": {"name": "Jane", "slug": "jane-doe"},
    "tags": ["git", "cli"],
}


def test_good_frontmatter_passes_every_rule():
    f = md(GOOD)
    for rule in (FrontmatterRule(), RequiredKeysRule(), SchemaRule(), TimestampsRule(), SlugsRule(),
                 TagsRule(), ExcerptRule(), BodyRule(), LinksRule()):
        assert rule.check(f) == [], rule.name


def test_frontmatter_rule():
    assert FrontmatterRule().check(md(has_frontmatter=False))[0].message.startswith("missing frontmatter")
    (issue,) = FrontmatterRule().check(md(error="invalid YAML in frontmatter: boom"))
    assert issue.rule == "frontmatter"
    assert issue.severity == ERROR


def test_required_keys_missing_and_empty():
    fm = dict(GOOD)
    del fm["author"]
    fm["tags"] = []
    issues = RequiredKeysRule().check(md(fm))
    assert {(i.field, i.message) for i in issues} == {
        ("author", "missing required key 'author'"),
        ("tags", "required key 'tags' is empty"),
    }


def test_required_keys_configurable():
    fm = {k: v for k, v in GOOD.items() if k != "excerpt"}
    assert RequiredKeysRule(required_keys=("excerpt",)).check(md(fm))[0].field == "excerpt"


def test_schema_reports_type_errors_only():
    fm = dict(GOOD, tags="git", author={"name": "Jane"}, publishedAt="garbage")
    del fm["title"]
    fields = {i.field for i in SchemaRule().check(md(fm))}
    assert "tags" in fields
    assert "author.slug" in fields
    # missing keys and timestamps are reported by their own rules
    assert "title" not in fields
    assert "publishedAt" not in fields


def test_timestamps_invalid_value():
    issues = TimestampsRule().check(md(dict(GOOD, updatedAt="next tuesday")))
    assert [i.field for i in issues] == ["updatedAt"]


def test_updated_before_published_is_an_error():
    issues = TimestampsRule().check(md(dict(GOOD, updatedAt="2023-12-31T23:59:59Z")))
    assert len(issues) == 1
    assert issues[0].field == "updatedAt"
    assert "earlier than publishedAt" in issues[0].message


def test_updated_compared_with_date_when_no_published_at():
    fm = {k: v for k, v in GOOD.items() if k != "publishedAt"}
    fm["updatedAt"] = "2023-06-01"
    assert len(TimestampsRule().check(md(fm))) == 1


def test_equal_timestamps_pass():
    fm = dict(GOOD, updatedAt=GOOD["publishedAt"])
    assert TimestampsRule().check(md(fm)) == []


def test_naive_and_aware_timestamps_compare():
    fm = dict(GOOD, publishedAt="2024-01-01T10:00:00", updatedAt="2024-01-01T11:00:00+00:00")
    assert TimestampsRule().check(md(fm)) == []


def test_slugs_must_be_url_safe():
    fm = dict(GOOD, category={"name": "CI/CD", "slug": "CI_CD"}, author={"name": "Jane"})
    issues = SlugsRule().check(md(fm))
    assert {i.field for i in issues} == {"category.slug", "author.slug"}


def test_tags_rule_warnings():
    fm = dict(GOOD, tags=["Docker", "docker", " ", "!!!", "k8s"])
    issues = TagsRule().check(md(fm))
    assert all(i.severity == WARNING for i in issues)
    messages = [i.message for i in issues]
    assert any("duplicate tag 'docker'" in m for m in messages)
    assert "blank tag" in messages
    assert any("no usable slug" in m for m in messages)
    assert len(issues) == 3


def test_excerpt_rule():
    assert ExcerptRule().check(md(dict(GOOD, excerpt="  ")))[0].severity == WARNING


def test_body_rule():
    assert BodyRule().check(md(GOOD, body="\n  \n"))[0].rule == "body"


def test_links_rule():
    body = (
        "[a](https://example.com/x) and [b](https://example.com/x)\n"
        "[bad](http://:80) \n"
        "```\n[ignored](https://example.com/x)\n```\n"
    )
    issues = LinksRule().check(md(GOOD, body=body))
    messages = sorted(i.message for i in issues)
    assert messages == ["duplicate link 'https://example.com/x'", "malformed URL 'http://:80'"]


def test_references_rule():
    files = [
        md(GOOD, name="a"),
        md(dict(GOOD, category={"name": "Cloud", "slug": "cloud"}), name="b"),
    ]
    rule = ReferencesRule(known_categories=frozenset({"git"}), known_authors=None)
    issues = rule.check_all(files)
    assert len(issues) == 1
    assert issues[0].path == Path("b.md")
    assert issues[0].field == "category.slug"


def test_links_rule_keeps_parentheses_in_urls():
    body = (
        "[a](https://en.wikipedia.org/wiki/Foo_(bar)) and "
        "[b](https://en.wikipedia.org/wiki/Foo_(baz)) and "
        "[c](https://example.com/x \"title\")\n"
    )
    assert LinksRule().check(md(GOOD, body=body)) == []
    dup = "[a](https://en.wikipedia.org/wiki/Foo_(bar)) [b](https://en.wikipedia.org/wiki/Foo_(bar))"
    (issue,) = LinksRule().check(md(GOOD, body=dup))
    assert issue.message == "duplicate link 'https://en.wikipedia.org/wiki/Foo_(bar)'"
