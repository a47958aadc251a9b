from pathlib import Path
from textwrap import dedent

import pytest

VALID_POST = dedent(
    """\
    ---
    title: 'How to Rename a Git Branch'
    excerpt: 'Rename local and remote branches without losing history.'
    category:
      name: 'Git'
      slug: 'git'
    date: '2024-03-10'
    publishedAt: '2024-03-10T09:00:00Z'
    updatedAt: '2024-04-01T12:30:00Z'
    readingTime: '4 min read'
    author:
      name: 'DevOps Daily Team'
      slug: 'devops-daily-team'
    tags:
      - Git
      - Version Control
    ---

    ## Rename the local branch

    ```bash
    git branch -m old-name new-name
    # not a heading
    ```

    See the [git docs](https://git-scm.com/docs/git-branch).
    """
)


def write_md(directory: Path, name: str, text: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


def make_post(
    title: str,
    *,
    category: tuple[str, str] = ("Docker", "docker"),
    author: tuple[str, str] = ("Jane Doe", "jane-doe"),
    date: str = "2024-01-15",
    published_at: str | None = None,
    updated_at: str | None = None,
    tags: tuple[str, ...] = ("Docker",),
    body: str = "Some content.\n",
) -> str:
    lines = [
        "---",
        f"title: '{title}'",
        f"excerpt: 'About {title}'",
        "category:",
        f"  name: '{category[0]}'",
        f"  slug: '{category[1]}'",
        f"date: '{date}'",
    ]
    if published_at:
        lines.append(f"publishedAt: '{published_at}'")
    if updated_at:
        lines.append(f"updatedAt: '{updated_at}'")
    lines += [
        "author:",
        f"  name: '{author[0]}'",
        f"  slug: '{author[1]}'",
        "tags:",
    ]
    lines += [f"  - '{t}'" for t in tags]
    lines.append("---")
    return "\n".join(lines) + "\n\n" + body


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """A small content tree: three valid posts, one broken post, descriptors."""
    root = tmp_path / "content"
    posts = root / "posts"
    write_md(posts, "rename-git-branch.md", VALID_POST)
    write_md(
        posts,
        "docker-compose-basics.md",
        make_post(
            "Docker Compose Basics",
            published_at="2024-05-01T08:00:00Z",
            tags=("Docker", "docker compose"),
        ),
    )
    write_md(
        posts,
        "terraform-state.md",
        make_post(
            "Terraform State",
            category=("Terraform", "terraform"),
            date="2023-11-20",
            tags=("terraform", "IaC"),
        ),
    )
    write_md(posts, "broken.md", "---\ntitle: [unclosed\n---\nbody\n")

    write_md(root / "categories", "git.md", "---\nname: Git\ndescription: Version control\n---\n")
    write_md(root / "categories", "docker.md", "---\nname: Docker\nicon: Box\n---\n")
    write_md(root / "authors", "jane-doe.md", "---\nname: Jane Doe\nbio: Writes about containers.\n---\n")
    return root
