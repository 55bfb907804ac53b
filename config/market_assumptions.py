# =============================================================================
# Market and policy constants used in projections and simulations
# =============================================================================

# Fallback when no withdrawal tier covers the current age (the "4% rule")
default_withdrawal_rate = 4.0

# Monte Carlo horizon is capped at this age regardless of max_age
max_simulation_age = 100

# Ages at which trial survival (portfolio still positive) is reported
survival_checkpoint_ages = (70, 80, 90, 95, 100)

# Final-balance percentiles reported by the simulator
percentile_levels = {
    "p10": 0.10,
    "p25": 0.25,
    "p50": 0.50,
    "p75": 0.75,
    "p90": 0.90,
}

# Return defaults (nominal percent); overridden by config/default_setup.xml
pre_retirement_return = 7.0
post_retirement_return = 5.0
return_volatility = 15.0
