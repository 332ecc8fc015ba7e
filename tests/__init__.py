"""Tests for the circuit compiler, witness evaluator and template library."""
