"""
Prompt Builder for Sentinel
Renders the analysis and fix prompts from the knowledge base with Jinja2
"""

from typing import Mapping, Sequence

from jinja2 import Template

from sentinel.data.knowledge_base import (
    KNOWLEDGE_BASE,
    REVIEW_FOCUS,
    SEVERITY_LEVELS,
    VULNERABILITY_TYPES,
    VulnerabilityPattern,
)

from .model import SEVERITY_WEIGHTS, VulnerabilityFinding

# The contract is embedded verbatim; a fence terminator inside it can break
# the framing and that is accepted.
ANALYSIS_TEMPLATE = Template("""You are a Sui Move security auditor. Analyze this contract for vulnerabilities.

```move
{{ code }}
```

### Knowledge Base (Patterns to check)
{% for pattern in patterns -%}
- {{ pattern.type }}: {{ pattern.description }} (Why: {{ pattern.explanation }})
{% if include_examples %}  Vulnerable:
```move
{{ pattern.bad_code | trim }}
```
  Secure:
```move
{{ pattern.good_code | trim }}
```
{% endif %}{% endfor %}
### Output Instructions
Identify security issues related to: {{ focus | join(', ') }}.
Classify each finding as one of: {{ types | join(', ') }}, or name a more specific type.
Be concise: keep descriptions short so the whole answer fits in one response.

### Scoring
Start from 100 and deduct per finding: {% for severity, weight in weights.items() %}{{ severity }} -{{ weight }}{% if not loop.last %}, {% endif %}{% endfor %}. Never go below 0.

Return JSON ONLY:
{
  "summary": "Brief summary",
  "score": 0-100 (integer, lower is worse security),
  "attack_diagram": "REQUIRED. Mermaid sequenceDiagram string illustrating the attack flow. Use \\n for newlines. Start with 'sequenceDiagram'. Participant names must be simple words (no '::' or special chars).",
  "vulnerabilities": [
    {
      "severity": {{ severities }},
      "type": "Vulnerability Type",
      "location": "Function name",
      "title": "Short title",
      "description": "Concise explanation.",
      "code_snippet": "Relevant code",
      "fix": "Fixed code snippet",
      "confidence": "High" | "Medium" | "Low"
    }
  ],
  "recommendations": ["Action item 1", "Action item 2"]
}""")

FIX_TEMPLATE = Template("""You are a Sui Move security expert.

This code has a {{ finding.type or 'security' }} vulnerability:

```move
{{ finding.code_snippet }}
```

Vulnerability details: {{ finding.description }}

Provide:
1. A secure, fixed version of this code
2. Detailed explanation of what changed and why
3. Any additional security considerations

Format as JSON:
{
  "fixed_code": "...",
  "explanation": "...",
  "additional_notes": "..."
}""")


def build_analysis_prompt(code: str,
                          knowledge_base: Sequence[VulnerabilityPattern] = KNOWLEDGE_BASE,
                          weights: Mapping[str, int] = SEVERITY_WEIGHTS,
                          include_examples: bool = False) -> str:
    """Build the auditing prompt for ``code``.

    By default only the short form of each pattern (type, description,
    rationale) is embedded. ``include_examples`` adds each pattern's
    vulnerable and secure code, at the cost of a much longer prompt.
    """
    return ANALYSIS_TEMPLATE.render(
        code=code,
        patterns=knowledge_base,
        focus=REVIEW_FOCUS,
        weights=weights,
        include_examples=include_examples,
        types=VULNERABILITY_TYPES,
        severities=" | ".join(f'"{level}"' for level in SEVERITY_LEVELS),
    )


def build_fix_prompt(finding: VulnerabilityFinding) -> str:
    """Build the prompt asking for a corrected version of one finding's code."""
    return FIX_TEMPLATE.render(finding=finding)
