"""Core subtitle processing: IR types, alignment, optimization, errors, retry.

WHY: Everything between "provider returned cues" and "formatter writes a
file" lives here, independent of HTTP and audio tooling.

RULES:
- Functions here never raise on malformed timing; they repair or drop
- No I/O; providers and the service do I/O
"""
