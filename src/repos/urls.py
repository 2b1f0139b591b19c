"""Mirror URL expansion."""

ARCH_VAR = "$arch"
REPO_VAR = "$repo"


def prepare_url(url: str, repo: str, arch: str, suffix: str) -> str:
    """Expand a mirror URL template into a download URL.

    $arch is replaced first, then $repo, each in a single pass over the
    string. A substituted value is never rescanned for its own token.

    Args:
        url: Mirror URL template, e.g. "http://mirror/$repo/os/$arch"
        repo: Repository name
        arch: Machine architecture
        suffix: Filename suffix, e.g. ".files"

    Returns:
        Template with placeholders expanded and "/<repo><suffix>" appended
    """
    expanded = url.replace(ARCH_VAR, arch).replace(REPO_VAR, repo)
    return f"{expanded}/{repo}{suffix}"
