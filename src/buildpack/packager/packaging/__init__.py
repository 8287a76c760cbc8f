"""
The `packaging` sub-package contains the stages of building a buildpack archive.

This includes:
- Loading and validating manifest.yml.
- Selecting the buildpack files to ship, honouring exclusions.
- Fetching and md5-verifying dependencies for cached buildpacks.
- Writing the zip archive and orchestrating the stages above.
"""
