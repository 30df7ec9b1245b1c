"""
Test suite for Sentinel prompt construction
"""

from sentinel.core.model import VulnerabilityFinding
from sentinel.core.prompt import build_analysis_prompt, build_fix_prompt
from sentinel.data.knowledge_base import KNOWLEDGE_BASE, VULNERABILITY_TYPES, VulnerabilityPattern


CONTRACT = """module demo::vault {
    public fun withdraw(vault: &mut Vault, amount: u64) { }
}"""


class TestAnalysisPrompt:
    """Test cases for the analysis prompt."""

    def test_embeds_contract_verbatim(self):
        prompt = build_analysis_prompt(CONTRACT)
        assert f"```move\n{CONTRACT}\n```" in prompt

    def test_includes_every_pattern_without_exemplar_code(self):
        prompt = build_analysis_prompt(CONTRACT)
        for pattern in KNOWLEDGE_BASE:
            assert f"- {pattern.type}: {pattern.description}" in prompt
            assert pattern.bad_code.strip() not in prompt

    def test_requests_all_output_keys(self):
        prompt = build_analysis_prompt(CONTRACT)
        for key in ("summary", "score", "attack_diagram", "vulnerabilities", "recommendations",
                    "code_snippet", "confidence"):
            assert f'"{key}"' in prompt
        assert "Return JSON ONLY" in prompt
        assert "Use \\n for newlines" in prompt

    def test_rubric_matches_severity_weights(self):
        prompt = build_analysis_prompt(CONTRACT)
        assert "Critical -30, High -20, Medium -10, Low -5" in prompt

    def test_custom_knowledge_base_and_weights(self):
        pattern = VulnerabilityPattern(
            type="Custom Pattern",
            description="Something specific",
            bad_code="bad()",
            good_code="good()",
            explanation="Because",
        )
        prompt = build_analysis_prompt(CONTRACT, knowledge_base=[pattern], weights={"Critical": 50})
        assert "- Custom Pattern: Something specific (Why: Because)" in prompt
        assert KNOWLEDGE_BASE[0].type not in prompt
        assert "Critical -50. Never go below 0." in prompt

    def test_contract_is_not_escaped(self):
        source = "let x = a < b && c > d; // \"quoted\" {{ braces }}"
        assert source in build_analysis_prompt(source)


class TestFixPrompt:
    """Test cases for the fix prompt."""

    def test_includes_finding_details(self):
        finding = VulnerabilityFinding(
            severity="High",
            type="Capability Leak",
            description="AdminCap is shared",
            code_snippet="transfer::public_share_object(cap);",
        )
        prompt = build_fix_prompt(finding)

        assert "Capability Leak vulnerability" in prompt
        assert "transfer::public_share_object(cap);" in prompt
        assert "AdminCap is shared" in prompt
        assert '"fixed_code"' in prompt

    def test_missing_type_falls_back(self):
        prompt = build_fix_prompt(VulnerabilityFinding(severity="Low", code_snippet="x"))
        assert "security vulnerability" in prompt


class TestPromptExamples:
    """Test cases for embedding pattern code exemplars."""

    def test_examples_included_on_request(self):
        prompt = build_analysis_prompt(CONTRACT, include_examples=True)
        for pattern in KNOWLEDGE_BASE:
            assert pattern.bad_code.strip() in prompt
            assert pattern.good_code.strip() in prompt
        assert "Vulnerable:" in prompt and "Secure:" in prompt

    def test_lists_vulnerability_types(self):
        prompt = build_analysis_prompt(CONTRACT)
        assert f"Classify each finding as one of: {', '.join(VULNERABILITY_TYPES)}" in prompt
