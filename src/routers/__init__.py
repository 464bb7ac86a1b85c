"""HTTP routers for the RingCentral session gateway."""
