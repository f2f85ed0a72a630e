"""Challenge trigger job: bucket skill aggregation and challenge submission."""
