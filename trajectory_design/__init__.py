"""
Transfer Trajectory Design Toolkit
Builds and evaluates multi-leg interplanetary transfers:
- Leg and node settings (unpowered, DSM position/velocity based, departure, swingby, capture)
- Assembly of a TransferTrajectory from settings and a system of bodies
- Delta-V / time of flight evaluation and state sampling along the transfer
"""
__version__ = "0.1.0"
