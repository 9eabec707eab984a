"""
SigLineage — Certificate Identity

Turns authenticated X.509 certificate material into the opaque identities
the lineage system compares.
"""
