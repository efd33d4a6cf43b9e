"""
MediClear - Medical Report Simplification Service

Turns medical reports (pasted text or a photo of the report) into a
plain-language summary, key takeaways and a glossary, and translates
that structured result into other languages on request.

IMPORTANT: This is NOT a diagnosis tool. It must NEVER replace a doctor.
"""

__version__ = "1.0.0"
__author__ = "MediClear Team"
