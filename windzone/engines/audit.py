"""
Calculation audit trail shared by the engines.
"""

from typing import Dict, List


def add_calc_step(steps: List[Dict[str, str]], description: str,
                  calculation: str, reference: str = "") -> None:
    """Add a calculation step to the audit trail"""
    steps.append({
        "description": description,
        "calculation": calculation,
        "reference": reference,
    })
