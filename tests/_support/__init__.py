"""
Test support utilities for spine-sql tests.

Recording fakes for the connection provider / connection / cursor chain live
in :mod:`tests._support.fault_injection`.
"""
