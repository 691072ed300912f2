"""
Family Accountant - Source Package

A household finance assistant for an Australian family: income tax,
capital gains, SMSF contribution caps and family trust distributions,
exposed to a chat assistant as callable tools.

DESIGN PRINCIPLES:
1. Calculators are pure functions over typed models
2. The LLM calls tools, it never does arithmetic itself
3. Tool failures come back as data, not exceptions
4. Every tool call is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Family Accountant Team"
