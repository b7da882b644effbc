"""
Auxiliary forecast metrics.

Modules
-------
liquidity   Days-to-sell velocity and order-book gap analysis.
pressure    RAP / Value divergence.
confidence  Regime-aware confidence score with explanatory factors.
"""
