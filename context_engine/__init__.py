"""Clinical ConText Engine.

Detects context modifiers (negation, hypothetical, historical, family
history, ...) around trigger phrases in tokenized clinical text.
"""

__version__ = "0.1.0"
