"""
Autonomous agents: lifecycle base class and the simulated market maker.
"""
