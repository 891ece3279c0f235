from app.features.audit.schemas.signals import (
    ContentAnalysis,
    HeadingStructure,
    ImageStats,
    LinkStats,
)
from app.features.audit.services.analysis.issue_rules import (
    FIXED_RECOMMENDATIONS,
    ISSUE_RULES,
    analyze_issues_and_recommendations,
    derive_issues,
    derive_recommendations,
)


def issue_ids(signals):
    return [issue.id for issue in derive_issues(**signals)]


class TestDeriveIssues:
    def test_clean_page_has_no_issues(self, clean_signals):
        assert derive_issues(**clean_signals) == []

    def test_bare_page_issues_in_rule_order(self, bare_signals):
        assert issue_ids(bare_signals) == [
            "title-length",
            "meta-description",
            "missing-h1",
            "no-ssl",
            "no-viewport",
            "slow-loading",
        ]

    def test_missing_meta_description_text(self, bare_signals):
        issues = {i.id: i for i in derive_issues(**bare_signals)}
        meta = issues["meta-description"]
        assert meta.type == "error"
        assert meta.category == "seo"
        assert meta.impact == "high"
        assert meta.description == "Meta description is missing."

    def test_short_meta_description_reports_length(self, clean_signals):
        seo = clean_signals["seo"]
        clean_signals["seo"] = seo.model_copy(update={
            "meta_description": seo.meta_description.model_copy(
                update={"content": "Too short", "length": 9, "is_optimal": False}
            )
        })
        issue = derive_issues(**clean_signals)[0]
        assert issue.id == "meta-description"
        assert issue.description == (
            "Meta description is 9 characters. Optimal length is 120-160 characters."
        )

    def test_multiple_h1(self, clean_signals):
        clean_signals["seo"] = clean_signals["seo"].model_copy(
            update={"heading_structure": HeadingStructure(h1=["One", "Two", "Three"])}
        )
        issues = derive_issues(**clean_signals)
        assert [i.id for i in issues] == ["multiple-h1"]
        assert issues[0].description == "Page has 3 H1 tags."
        assert issues[0].impact == "medium"

    def test_content_rules(self, clean_signals):
        clean_signals["content"] = ContentAnalysis(
            word_count=500,
            images=ImageStats(total=5, without_alt=2),
            links=LinkStats(total=8, empty=3),
        )
        issues = derive_issues(**clean_signals)
        assert [i.id for i in issues] == ["images-without-alt", "empty-links"]
        assert issues[0].description == "2 images are missing alt text."
        assert issues[1].description == "3 links have empty or missing text."
        assert all(i.category == "content" for i in issues)

    def test_slow_loading_threshold_is_strict(self, clean_signals):
        clean_signals["technical"] = clean_signals["technical"].model_copy(update={"load_time": 3000})
        assert "slow-loading" not in issue_ids(clean_signals)

        clean_signals["technical"] = clean_signals["technical"].model_copy(update={"load_time": 3000.5})
        issues = derive_issues(**clean_signals)
        assert issues[-1].id == "slow-loading"
        assert issues[-1].category == "performance"
        assert issues[-1].description == "Page loads in 3001ms."

    def test_deterministic(self, bare_signals):
        first = derive_issues(**bare_signals)
        second = derive_issues(**bare_signals)
        assert first == second

    def test_every_rule_has_a_known_category(self, bare_signals):
        categories = {"seo", "technical", "content", "performance"}
        assert len(ISSUE_RULES) == 9
        for issue in derive_issues(**bare_signals):
            assert issue.category in categories


class TestRecommendations:
    def test_fixed_recommendations(self, clean_signals):
        _, recommendations = analyze_issues_and_recommendations(**clean_signals)
        assert [r.id for r in recommendations] == ["seo-optimization", "technical-improvements"]
        assert recommendations[0].priority == "high"
        assert recommendations[0].action_items == [
            "Optimize title tag length",
            "Add or improve meta description",
            "Ensure single H1 tag per page",
            "Add Open Graph tags",
        ]
        assert recommendations[1].priority == "medium"
        assert recommendations[1].estimated_impact == "medium"

    def test_each_audit_gets_its_own_recommendations(self):
        first = derive_recommendations()
        first[0].action_items.append("Hire an SEO agency")

        assert len(derive_recommendations()[0].action_items) == 4
        assert len(FIXED_RECOMMENDATIONS[0].action_items) == 4
