"""
Mission Analysis Package
Contains the node-level tools used at departure, swingby and arrival:
- Escape and capture Delta-V for bound parking orbits
- Departure excess velocity construction from magnitude and angles
"""
