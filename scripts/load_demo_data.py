#!/usr/bin/env python3
"""Load sample billing data and print the school's billing report.

Usage:
    PYTHONPATH=. python scripts/load_demo_data.py

Creates one school, two suppliers and three supplier orders in the DB.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from backoffice.analytics.billing import school_billing_report
from backoffice.config import configure_logging, load_config, open_session
from backoffice.data.demo import seed_demo_data


def main():
    config = load_config()
    configure_logging(config)
    session = open_session(config)
    try:
        school = seed_demo_data(session)
        report = school_billing_report(session, school.id, include_draft=True)
        print(f"Demo data loaded for {school.name} (id {school.id}).")
        print(report["classes"].to_string(index=False))
    finally:
        session.close()


if __name__ == "__main__":
    main()
