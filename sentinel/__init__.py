"""
Sentinel - LLM-assisted security review for Sui Move smart contracts
KADEZ-406 | Contract Analyzer

Submits contract source to a generative model through a credential-hiding
proxy and turns the model's answer into a scored vulnerability report.

Copyright (c) 2024 KADEZ-406 Team
Licensed under MIT License
"""

__version__ = "1.0.0"
__author__ = "KADEZ-406 Team"
__description__ = "LLM-assisted security review for Sui Move smart contracts"

# Shown by the CLI and embedded in generated reports
ADVISORY_NOTICE = """
⚠️  ADVISORY ONLY ⚠️
Findings are produced by an external language model and are not a substitute
for a professional audit. Always verify each finding against the source.
"""

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
