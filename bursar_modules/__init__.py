"""Business modules built on the bursar kernel: reporting and student fees."""
