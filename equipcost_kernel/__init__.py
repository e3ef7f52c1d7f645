"""
Equipment Cost Kernel

Pure foundation for the equipment cost-sharing engines:
- Decimal arithmetic bound to an explicit, immutable policy
- Boundary parsing that rejects floats and malformed input
- Frozen domain value objects (assets, parameters, members, scenarios)
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
