"""Core of the flight insurance oracle: calculation, claim check, encoding, harness."""
