"""
Report Generation Utilities for Sentinel
JSON export, HTML report and plain-text findings table
"""

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Template
from tabulate import tabulate

from sentinel import ADVISORY_NOTICE, __version__
from sentinel.core.model import AnalysisResult

SEVERITY_COLORS = {
    "Critical": "#ef4444",
    "High": "#f97316",
    "Medium": "#eab308",
    "Low": "#3b82f6",
}

HTML_TEMPLATE = Template("""<!DOCTYPE html>
<html>
<head>
    <title>Sentinel Contract Analysis</title>
    <meta charset="utf-8">
    <style>
        body { font-family: Arial, sans-serif; margin: 20px; background-color: #0a0a0a; color: #e4e4e7; }
        .header { background: linear-gradient(135deg, #0284fe 0%, #1e3a8a 100%); padding: 20px; border-radius: 10px; margin-bottom: 20px; }
        .card { background: #18181b; padding: 20px; border-radius: 8px; margin-bottom: 20px; }
        .score { font-size: 48px; font-weight: bold; }
        .finding { background: #18181b; margin: 10px 0; padding: 15px; border-radius: 8px; border-left: 4px solid #52525b; }
        .severity-badge { padding: 2px 8px; border-radius: 4px; color: white; font-size: 12px; font-weight: bold; }
        pre { background: #27272a; padding: 10px; border-radius: 4px; overflow-x: auto; font-size: 12px; }
        .notice { background: #422006; padding: 15px; border-radius: 8px; margin-bottom: 20px; }
    </style>
</head>
<body>
    <div class="header">
        <h1>Security Analysis Report</h1>
        <p>Generated on {{ generated_at }} | Sentinel v{{ version }}</p>
    </div>

    <div class="notice"><pre>{{ notice }}</pre></div>

    <div class="card">
        <div class="score" style="color: {{ score_color }};">{{ result.score }}/100</div>
        <p>{{ result.summary }}</p>
        <p>
        {% for severity, count in result.severity_counts.items() %}
            <span class="severity-badge" style="background-color: {{ colors.get(severity, '#52525b') }};">{{ severity }}: {{ count }}</span>
        {% endfor %}
        </p>
    </div>

    {% if source %}
    <h2>Analyzed Source</h2>
    <pre>{{ source }}</pre>
    {% endif %}

    <h2>Findings ({{ result.vulnerabilities | length }})</h2>
    {% for finding in result.vulnerabilities %}
    <div class="finding" style="border-left-color: {{ colors.get(finding.severity, '#52525b') }};">
        <h3>
            <span class="severity-badge" style="background-color: {{ colors.get(finding.severity, '#52525b') }};">{{ finding.severity | upper }}</span>
            {{ finding.title or finding.type }}
        </h3>
        <p><strong>Type:</strong> {{ finding.type }} | <strong>Location:</strong> {{ finding.location }} | <strong>Confidence:</strong> {{ finding.confidence }}</p>
        <p>{{ finding.description }}</p>
        {% if finding.code_snippet %}<h4>Vulnerable code</h4><pre>{{ finding.code_snippet }}</pre>{% endif %}
        {% if finding.fix %}<h4>Suggested fix</h4><pre>{{ finding.fix }}</pre>{% endif %}
    </div>
    {% else %}
    <p>No vulnerabilities reported.</p>
    {% endfor %}

    {% if result.attack_diagram %}
    <h2>Attack Flow</h2>
    <pre class="mermaid">{{ result.attack_diagram }}</pre>
    {% endif %}

    <h2>Recommendations</h2>
    <ul>
    {% for item in result.recommendations %}
        <li>{{ item }}</li>
    {% endfor %}
    </ul>
</body>
</html>
""", autoescape=True)


def score_color(score: int) -> str:
    if score >= 80:
        return "#22c55e"
    if score >= 50:
        return SEVERITY_COLORS["Medium"]
    return SEVERITY_COLORS["Critical"]


class ReportGenerator:
    """Write analysis results to disk in the supported formats."""

    def __init__(self, output_dir: str = "./reports"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(__name__)

    def export_json(self, result: AnalysisResult, filename: Optional[str] = None) -> str:
        """Write the exported report (timestamp, score, summary, findings, recommendations)."""
        if not filename:
            filename = f"sentinel-analysis-{int(time.time() * 1000)}.json"

        filepath = self.output_dir / filename
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(result.to_report(), f, indent=2, ensure_ascii=False)

        self.logger.info(f"JSON report exported: {filepath}")
        return str(filepath)

    def render_html(self, result: AnalysisResult, source: str = "") -> str:
        return HTML_TEMPLATE.render(
            result=result,
            source=source,
            colors=SEVERITY_COLORS,
            score_color=score_color(result.score),
            generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            version=__version__,
            notice=ADVISORY_NOTICE.strip(),
        )

    def generate_html_report(self, result: AnalysisResult, source: str = "",
                             filename: Optional[str] = None) -> str:
        """Render the HTML report and return its path."""
        if not filename:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"report_{timestamp}.html"

        filepath = self.output_dir / filename
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(self.render_html(result, source))

        self.logger.info(f"HTML report generated: {filepath}")
        return str(filepath)


def findings_table(result: AnalysisResult, tablefmt: str = "github") -> str:
    """Plain-text table of findings, one row per finding in report order."""
    rows = [
        [index, finding.severity, finding.title or finding.type, finding.location, finding.confidence]
        for index, finding in enumerate(result.vulnerabilities, start=1)
    ]
    return tabulate(rows, headers=["#", "Severity", "Title", "Location", "Confidence"], tablefmt=tablefmt)
