"""ReadyRoom reporting package.

Organized by feature modules (cycles, roster, attendance, reports) with
Protocol-based repositories, pure services and a thin Flask/CLI layer.
"""
