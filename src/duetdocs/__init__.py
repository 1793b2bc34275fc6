#!/usr/bin/env python3
"""
DuetDocs: schema-validated documents edited by humans and LLM agents through
a restricted JSON Patch protocol.
"""

__version__ = "0.1.0"
