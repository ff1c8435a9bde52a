"""自适应查询规划测试。"""

from itertools import product

import pytest

from skosprobe.constants import SPARQL_PREFIXES
from skosprobe.models.analysis import (
    AnalysisResult,
    LabelPredicateCapabilities,
    LabelPredicates,
    RelationshipCapabilities,
)
from skosprobe.planner import (
    MembershipStrategy,
    QueryPlanner,
    can_use_direct,
    choose_strategy,
    label_union_clause,
    scheme_membership_fragment,
)
from skosprobe.planner.fragments import HIERARCHY_PATH
from skosprobe.utils.sparql import scheme_uri_variants, with_prefixes

SCHEME = "http://example.org/scheme/animals"

DIRECT_FLAGS = (
    "has_top_concept_of",
    "has_has_top_concept",
    "has_broader_transitive",
    "has_narrower_transitive",
)


def make_analysis(relationships=None, *, scheme_uris=(SCHEME,), limited=False, count=None, **kwargs):
    uris = list(scheme_uris)
    if count is None:
        count = len(uris) + (1 if limited else 0)
    return AnalysisResult(
        relationships=relationships,
        scheme_uris=uris,
        scheme_count=count,
        schemes_limited=limited,
        **kwargs,
    )


def all_relationships(**overrides):
    values = {
        "has_in_scheme": True,
        "has_top_concept_of": True,
        "has_has_top_concept": True,
        "has_broader": True,
        "has_narrower": True,
        "has_broader_transitive": True,
        "has_narrower_transitive": True,
    }
    values.update(overrides)
    return RelationshipCapabilities(**values)


class TestStrategySelection:
    """策略选择测试。"""

    def test_direct_when_everything_is_proven(self):
        analysis = make_analysis(all_relationships())
        assert can_use_direct(analysis, SCHEME)
        assert choose_strategy(analysis, SCHEME) is MembershipStrategy.DIRECT

    def test_scenario_missing_broader_transitive(self):
        """测试 broaderTransitive 缺失时选择属性路径。"""
        analysis = make_analysis(all_relationships(has_broader_transitive=False))
        assert choose_strategy(analysis, SCHEME) is MembershipStrategy.PATH

    def test_direct_only_when_all_four_flags_true(self):
        """遍历四个标志的所有三值组合，只有全部为真时才允许直接策略。"""
        for combo in product((True, False, None), repeat=4):
            if None in combo:
                relationships = None
            else:
                relationships = all_relationships(**dict(zip(DIRECT_FLAGS, combo)))
            analysis = make_analysis(relationships)
            expected = all(value is True for value in combo)
            assert can_use_direct(analysis, SCHEME) is expected, combo

    def test_no_analysis_uses_path(self):
        assert choose_strategy(None, SCHEME) is MembershipStrategy.PATH
        assert choose_strategy(None, SCHEME, MembershipStrategy.DIRECT) is MembershipStrategy.PATH

    def test_missing_relationships_uses_path(self):
        assert choose_strategy(make_analysis(None), SCHEME) is MembershipStrategy.PATH

    def test_empty_scheme_list_uses_path(self):
        analysis = make_analysis(all_relationships(), scheme_uris=(), count=0)
        assert choose_strategy(analysis, SCHEME) is MembershipStrategy.PATH

    def test_unknown_scheme_count_uses_path(self):
        analysis = AnalysisResult(relationships=all_relationships(), scheme_count=None)
        assert choose_strategy(analysis, SCHEME) is MembershipStrategy.PATH

    def test_unlisted_scheme_uses_path(self):
        analysis = make_analysis(all_relationships())
        assert choose_strategy(analysis, "http://example.org/scheme/other") is MembershipStrategy.PATH

    def test_slash_variant_is_known(self):
        analysis = make_analysis(all_relationships())
        assert choose_strategy(analysis, f"{SCHEME}/") is MembershipStrategy.DIRECT

    def test_limited_scheme_list_trusts_unlisted_scheme(self):
        analysis = make_analysis(all_relationships(), limited=True)
        assert choose_strategy(analysis, "http://example.org/scheme/other") is MembershipStrategy.DIRECT

    def test_path_preference_is_always_honoured(self):
        analysis = make_analysis(all_relationships())
        assert choose_strategy(analysis, SCHEME, MembershipStrategy.PATH) is MembershipStrategy.PATH

    def test_direct_preference_is_downgraded(self):
        analysis = make_analysis(all_relationships(has_narrower_transitive=False))
        assert choose_strategy(analysis, SCHEME, MembershipStrategy.DIRECT) is MembershipStrategy.PATH


class TestFragments:
    """片段构建测试。"""

    def test_direct_fragment_uses_transitive_predicates(self):
        fragment = scheme_membership_fragment("?concept", MembershipStrategy.DIRECT)
        assert "skos:broaderTransitive" in fragment
        assert "skos:narrowerTransitive" in fragment
        assert HIERARCHY_PATH not in fragment

    def test_path_fragment_uses_property_path(self):
        fragment = scheme_membership_fragment("?concept", MembershipStrategy.PATH)
        assert HIERARCHY_PATH in fragment
        assert "Transitive" not in fragment

    def test_in_scheme_branch_is_optional(self):
        without = scheme_membership_fragment("?c", MembershipStrategy.PATH)
        with_branch = scheme_membership_fragment("?c", MembershipStrategy.PATH, include_in_scheme=True)
        assert "skos:inScheme" not in without
        assert "{ ?c skos:inScheme ?scheme }" in with_branch

    def test_scheme_uri_variants(self):
        assert scheme_uri_variants("http://a.org/s") == ["http://a.org/s", "http://a.org/s/"]
        assert scheme_uri_variants("http://a.org/s/") == ["http://a.org/s/", "http://a.org/s"]


class TestLabelClause:
    """标签子句测试。"""

    def test_all_branches_when_unknown(self):
        clause = label_union_clause("?c")
        for tag in ("prefLabel", "xlPrefLabel", "dctTitle", "dcTitle", "rdfsLabel"):
            assert f'"{tag}"' in clause
        assert "BIND(LANG(?label) AS ?labelLang)" in clause

    def test_all_branches_when_nothing_present(self):
        clause = label_union_clause("?c", LabelPredicateCapabilities())
        assert clause.count(" UNION ") == 4

    def test_only_present_predicates_in_priority_order(self):
        caps = LabelPredicateCapabilities(rdfs_label=True, pref_label=True)
        clause = label_union_clause("?c", caps)
        assert "dct:title" not in clause
        assert clause.index("skos:prefLabel") < clause.index("rdfs:label")


class TestQueryPlanner:
    """查询构建测试。"""

    def test_queries_carry_prefixes(self):
        query = QueryPlanner().scheme_members_query(SCHEME)
        assert query.startswith(SPARQL_PREFIXES)

    def test_members_query_without_analysis(self):
        query = QueryPlanner().scheme_members_query(SCHEME, page_size=50, offset=100)
        assert HIERARCHY_PATH in query
        assert "skos:inScheme" in query
        assert f"VALUES ?scheme {{ <{SCHEME}> <{SCHEME}/> }}" in query
        assert "LIMIT 51" in query
        assert "OFFSET 100" in query

    def test_members_query_direct(self):
        planner = QueryPlanner(make_analysis(all_relationships()))
        query = planner.scheme_members_query(SCHEME)
        assert planner.strategy_for(SCHEME) is MembershipStrategy.DIRECT
        assert "skos:broaderTransitive" in query
        assert HIERARCHY_PATH not in query

    def test_members_query_omits_in_scheme_when_absent(self):
        planner = QueryPlanner(make_analysis(all_relationships(has_in_scheme=False)))
        assert "skos:inScheme" not in planner.scheme_members_query(SCHEME)

    def test_top_concepts_query(self):
        query = QueryPlanner().top_concepts_query(SCHEME, page_size=10)
        assert "skos:topConceptOf" in query
        assert "skos:hasTopConcept" in query
        assert "FILTER NOT EXISTS { ?concept skos:broader ?broader }" in query
        assert "LIMIT 11" in query

    def test_children_query(self):
        query = QueryPlanner().children_query("http://example.org/c/1")
        assert "?concept skos:broader <http://example.org/c/1>" in query
        assert "<http://example.org/c/1> skos:narrower ?concept" in query

    def test_label_clause_follows_capabilities(self):
        analysis = make_analysis(
            all_relationships(),
            label_predicates=LabelPredicates(concept=LabelPredicateCapabilities(dct_title=True)),
        )
        query = QueryPlanner(analysis).children_query("http://example.org/c/1")
        assert "dct:title" in query
        assert "skos:prefLabel ?label" not in query

    def test_collections_query(self):
        query = QueryPlanner().collections_query(SCHEME)
        assert "?collection skos:member ?memberConcept" in query
        assert "?hasParentCollection" in query

    def test_collections_query_impossible(self):
        rel = all_relationships(has_in_scheme=False, has_top_concept_of=False, has_has_top_concept=False)
        assert QueryPlanner(make_analysis(rel)).collections_query(SCHEME) is None

    def test_child_collections_query(self):
        query = QueryPlanner().child_collections_query("http://example.org/col/1")
        assert "<http://example.org/col/1> skos:member ?collection" in query

    def test_orphans_need_relationships(self):
        assert QueryPlanner().orphan_concepts_query() is None
        assert QueryPlanner().orphan_collections_query() is None

    def test_orphan_concepts_query_branches(self):
        rel = all_relationships(has_broader_transitive=False, has_narrower_transitive=False)
        query = QueryPlanner(make_analysis(rel)).orphan_concepts_query(page_size=25)
        assert query.count("FILTER NOT EXISTS") == 1
        assert "skos:broader+" in query
        assert "skos:narrowerTransitive" not in query
        assert "LIMIT 25" in query

    def test_orphan_concepts_prefilter(self):
        query = QueryPlanner(make_analysis(all_relationships())).orphan_concepts_query(
            prefilter_direct_links=True
        )
        assert "FILTER NOT EXISTS { ?concept skos:inScheme ?scheme . }" in query
        assert "SELECT DISTINCT ?concept\n    WHERE" in query

    def test_orphan_concepts_without_any_branch(self):
        assert QueryPlanner(make_analysis(RelationshipCapabilities())).orphan_concepts_query() is None

    def test_orphan_collections_query(self):
        rel = all_relationships(has_broader_transitive=False)
        query = QueryPlanner(make_analysis(rel)).orphan_collections_query()
        assert "?collection skos:member ?concept" in query
        assert "skos:broader+" in query

    def test_find_scheme_query(self):
        query = QueryPlanner().find_scheme_query("http://example.org/c/1")
        assert "<http://example.org/c/1> skos:inScheme ?scheme" in query
        assert "?ancestor" in query
        assert "?scheme a skos:ConceptScheme" in query

    def test_invalid_uri_rejected(self):
        with pytest.raises(ValueError):
            QueryPlanner().children_query("http://example.org/a b")


class TestWithPrefixes:
    """前缀注入测试。"""

    def test_adds_prefixes(self):
        assert with_prefixes("ASK {}").startswith("PREFIX skos:")

    def test_keeps_existing_prefixes(self):
        query = "  prefix ex: <http://example.org/>\nASK {}"
        assert with_prefixes(query) == query
