"""
Main CLI entry point for aether-skills.

Provides the command-line interface using Click. Human-readable
output goes through Rich; every listing command also has a --json
form for scripting.
"""

import json as _json
import pathlib as _pathlib
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.table as _rich_table
import rich.text as _rich_text

import aetherskills
import aetherskills.config as config
import aetherskills.log as log
import aetherskills.skills as skills

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def _console() -> _rich_console.Console:
    """Console bound to the current stdout."""
    return _rich_console.Console(highlight=False, soft_wrap=True)


def _fail(message: str, json_output: bool = False) -> _typing.NoReturn:
    """Report an error and exit with status 1."""
    if json_output:
        _click.echo(_json.dumps({"error": message}))
    else:
        _click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def _echo_json(data: _typing.Any) -> None:
    _click.echo(_json.dumps(data, indent=2))


def _settings(ctx: _click.Context) -> config.Settings:
    settings: config.Settings = ctx.obj["settings"]
    return settings


def _require_catalog(settings: config.Settings, json_output: bool = False) -> _pathlib.Path:
    """Return the catalog directory, failing if it does not exist."""
    catalog_dir = settings.catalog_dir
    if not catalog_dir.is_dir():
        _fail(str(skills.SkillsDirectoryNotFoundError(catalog_dir)), json_output)
    return catalog_dir


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(aetherskills.__version__, "-v", "--version", prog_name="aether-skills")
@_click.option(
    "--skills-dir",
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    default=None,
    help="Skill catalog directory (default: <project>/skills)",
)
@_click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@_click.pass_context
def cli(ctx: _click.Context, skills_dir: _pathlib.Path | None, verbose: bool) -> None:
    """
    aether-skills - manage SKILL.md skill catalogs.

    \b
    Examples:
        aether-skills list                       # List catalog skills
        aether-skills show bdd-scenario-writer   # Show one skill
        aether-skills search testing             # Search names and content
        aether-skills validate --strict          # Lint every skill
        aether-skills install-all                # Install to ~/.claude/skills
    """
    overrides: dict[str, _typing.Any] = {}
    if skills_dir is not None:
        overrides["skills_dir"] = skills_dir.resolve()
    if verbose:
        overrides["verbose"] = True

    try:
        settings = config.Settings(**overrides)
    except config.ConfigFileError as e:
        _fail(str(e))
    except _pydantic.ValidationError as e:
        _fail(f"Invalid configuration: {e}")

    log.configure_logging(settings.effective_log_level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# =============================================================================
# Browsing
# =============================================================================


@cli.command(name="list")
@_click.option("--global", "include_global", is_flag=True, help="Include installed global skills")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def list_command(ctx: _click.Context, include_global: bool, json_output: bool) -> None:
    """List all skills with their descriptions."""
    settings = _settings(ctx)
    if include_global:
        settings.include_global = True
    if not settings.include_global:
        _require_catalog(settings, json_output)

    registry = settings.build_registry()
    skill_list = registry.list_skills()

    if json_output:
        _echo_json(registry.to_dict())
        return

    console = _console()
    console.print(f"Listing all skills in {settings.catalog_dir}...", markup=False)
    console.print()

    if skill_list:
        table = _rich_table.Table(show_header=True, header_style="bold", expand=False)
        table.add_column("Name", style="green", no_wrap=True)
        if settings.include_global:
            table.add_column("Source", no_wrap=True)
        table.add_column("Description")
        for s in skill_list:
            row: list[_typing.Any] = [s.name]
            if settings.include_global:
                row.append(s.source)
            row.append(_rich_text.Text(s.description))
            table.add_row(*row)
        console.print(table)

    console.print(f"Total skills found: {len(skill_list)}")


@cli.command(name="show")
@_click.argument("name")
@_click.option("--body/--no-body", default=True, help="Include the skill body")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def show_command(ctx: _click.Context, name: str, body: bool, json_output: bool) -> None:
    """Show details for a specific skill."""
    settings = _settings(ctx)
    _require_catalog(settings, json_output)
    registry = settings.build_registry()

    try:
        skill = registry.require_skill(name)
    except skills.SkillNotFoundError:
        _fail(f"Skill not found: {name}", json_output)

    graph = registry.reference_graph()

    if json_output:
        data = skill.to_dict()
        data["references"] = graph.references(skill.name)
        data["referenced_by"] = graph.referenced_by(skill.name)
        if body:
            data["body"] = skill.body
        _echo_json(data)
        return

    _click.echo(f"Skill: {skill.name}")
    _click.echo(f"  Description: {skill.description}")
    _click.echo(f"  Path: {skill.path}")
    _click.echo(f"  Source: {skill.source}")
    _click.echo(f"  Body lines: {skill.body_line_count}")
    if skill.body_line_count > settings.validation.body_soft_limit:
        _click.echo(
            f"  ⚠ Exceeds recommended limit of {settings.validation.body_soft_limit} lines"
        )
    if skill.license:
        _click.echo(f"  License: {skill.license}")
    if skill.tags:
        _click.echo(f"  Tags: {', '.join(skill.tags)}")

    if skill.section_titles:
        _click.echo()
        _click.echo("Sections:")
        for title in skill.section_titles:
            _click.echo(f"  - {title}")

    refs_out = graph.references(skill.name)
    refs_in = graph.referenced_by(skill.name)
    if refs_out or refs_in:
        _click.echo()
        _click.echo(f"References: {', '.join(refs_out) or '(none)'}")
        _click.echo(f"Referenced by: {', '.join(refs_in) or '(none)'}")

    ref_files = skill.list_reference_files()
    if ref_files:
        _click.echo()
        _click.echo("Reference files:")
        for ref in ref_files:
            _click.echo(f"  - {ref.relative_to(skill.path)}")

    scripts = skill.list_scripts()
    if scripts:
        _click.echo()
        _click.echo("Scripts:")
        for script in scripts:
            _click.echo(f"  - {script.name}")

    if body:
        _click.echo()
        _click.echo("--- Body ---")
        _click.echo(skill.body)


@cli.command(name="search")
@_click.argument("term")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def search_command(ctx: _click.Context, term: str, json_output: bool) -> None:
    """Search skills by name or content (case-insensitive)."""
    settings = _settings(ctx)
    _require_catalog(settings, json_output)
    registry = settings.build_registry()

    try:
        matches = registry.search(term)
    except ValueError as e:
        _fail(str(e), json_output)

    if json_output:
        _echo_json({
            "term": term,
            "count": len(matches),
            "skills": [s.name for s in matches],
        })
        return

    _click.echo(f"Searching for skills matching: {term}")
    _click.echo()
    for s in matches:
        _click.echo(f"{_click.style('✓', fg='green')} {s.name}")

    if not matches:
        _click.secho(f"Warning: No skills found matching: {term}", fg="yellow")
    else:
        _click.echo(f"Found {len(matches)} matching skills")


@cli.command(name="stats")
@_click.option("--tokens", "with_tokens", is_flag=True, help="Include token estimates")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def stats_command(ctx: _click.Context, with_tokens: bool, json_output: bool) -> None:
    """Show statistics about the skill catalog."""
    settings = _settings(ctx)
    _require_catalog(settings, json_output)
    registry = settings.build_registry()

    counter = None
    if with_tokens:
        import aetherskills.skills.tokens as tokens

        counter = tokens.SkillTokenCounter(settings.tokenizer_model)

    stats = registry.stats(token_counter=counter)

    if json_output:
        _echo_json(stats.to_dict())
        return

    console = _console()
    console.print(f"Total skills: {stats.total}")
    console.print(f"[green]Valid skills: {stats.valid}[/green]")
    if stats.invalid > 0:
        console.print(f"[red]Invalid skills: {stats.invalid}[/red]")
    console.print(f"Total body lines: {stats.total_body_lines}")
    console.print(f"Average body lines: {stats.average_body_lines:.1f}")

    if stats.largest:
        console.print()
        table = _rich_table.Table(title="Largest skills", title_justify="left")
        table.add_column("Name", no_wrap=True)
        table.add_column("Lines", justify="right")
        for name, lines in stats.largest:
            table.add_row(name, str(lines))
        console.print(table)

    console.print()
    coverage = _rich_table.Table(title="Section coverage", title_justify="left")
    coverage.add_column("Section", no_wrap=True)
    coverage.add_column("Skills", justify="right")
    for section, count in stats.section_coverage.items():
        coverage.add_row(section, str(count))
    console.print(coverage)

    if stats.token_estimates is not None:
        console.print()
        console.print(f"Metadata tokens (always loaded): {stats.total_metadata_tokens}")
        console.print(f"Body tokens (all skills): {stats.total_body_tokens}")


# =============================================================================
# Validation
# =============================================================================


def _print_result(result: skills.ValidationResult, strict: bool) -> None:
    label = result.directory_name
    if result.passed(strict):
        _click.echo(f"{_click.style('✓', fg='green')} {label}: Valid")
        remaining = result.issues
    else:
        first, *remaining = result.errors + result.warnings
        _click.echo(f"{_click.style('✗', fg='red')} {label}: {first.message}")
    for issue in remaining:
        _click.echo(f"    {issue.severity.value}: {issue.message} [{issue.code}]")


@cli.command(name="validate")
@_click.argument("name", required=False)
@_click.option("--strict/--no-strict", default=None, help="Treat warnings as failures")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def validate_command(
    ctx: _click.Context, name: str | None, strict: bool | None, json_output: bool
) -> None:
    """Validate skill format (all skills if no NAME is given).

    NAME may also be a path to a skill directory outside the catalog.
    """
    settings = _settings(ctx)
    strict = settings.validation.strict if strict is None else strict
    validator = settings.build_validator()

    if name:
        skill_dir = settings.catalog_dir / name
        if not skill_dir.is_dir():
            candidate = _pathlib.Path(name)
            if candidate.is_dir():
                skill_dir = candidate
            else:
                _fail(f"Skill not found: {name}", json_output)
        results = [validator.validate_dir(skill_dir)]
    else:
        catalog_dir = _require_catalog(settings, json_output)
        results = validator.validate_catalog(catalog_dir)

    passed = [r for r in results if r.passed(strict)]
    failed = [r for r in results if not r.passed(strict)]

    if json_output:
        _echo_json({
            "strict": strict,
            "valid": len(passed),
            "invalid": len(failed),
            "results": [r.to_dict() for r in results],
        })
    else:
        if name:
            _click.echo(f"Validating skill: {name}")
        else:
            _click.echo("Validating all skills...")
            _click.echo()
        for result in results:
            _print_result(result, strict)
        if not name:
            _click.echo()
            _click.echo("Validation complete")
            _click.secho(f"Valid: {len(passed)}", fg="green")
            if failed:
                _click.secho(f"Invalid: {len(failed)}", fg="red")

    if failed:
        raise SystemExit(1)


# =============================================================================
# Installation
# =============================================================================


def _build_installer(
    settings: config.Settings, target: _pathlib.Path | None
) -> skills.SkillInstaller:
    catalog_dir = _require_catalog(settings)
    try:
        install_dir = skills.resolve_install_target(
            target or settings.install_target,
            claude_dir=settings.claude_skills_dir,
            opencode_dir=settings.opencode_skills_dir,
        )
    except OSError as e:
        _fail(f"Cannot create install directory: {e}")
    return skills.SkillInstaller(catalog_dir, install_dir, settings.build_validator())


_target_option = _click.option(
    "--target",
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    default=None,
    help="Install directory (default: ~/.claude/skills or ~/.config/opencode/skill)",
)


@cli.command(name="install")
@_click.argument("name")
@_target_option
@_click.option("--force", is_flag=True, help="Install even if validation fails")
@_click.pass_context
def install_command(
    ctx: _click.Context, name: str, target: _pathlib.Path | None, force: bool
) -> None:
    """Install a skill to the global skills directory."""
    installer = _build_installer(_settings(ctx), target)

    _click.echo(f"Installing {name} to {installer.target}...")
    try:
        destination = installer.install(name, force=force)
    except skills.SkillError as e:
        _fail(str(e))

    _click.secho(f"Skill {name} installed successfully to {destination.parent}", fg="green")


@cli.command(name="install-all")
@_target_option
@_click.option("--force", is_flag=True, help="Install even skills that fail validation")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def install_all_command(
    ctx: _click.Context, target: _pathlib.Path | None, force: bool, json_output: bool
) -> None:
    """Install all valid skills to the global skills directory."""
    installer = _build_installer(_settings(ctx), target)

    try:
        report = installer.install_all(force=force)
    except skills.SkillError as e:
        _fail(str(e), json_output)

    if json_output:
        _echo_json(report.to_dict())
        return

    _click.secho(f"Installed {len(report.installed)} skills to {report.target}", fg="green")
    for skipped, reason in report.skipped.items():
        _click.secho(f"Skipped {skipped}: {reason}", fg="yellow")


@cli.command(name="uninstall")
@_click.argument("name")
@_target_option
@_click.pass_context
def uninstall_command(ctx: _click.Context, name: str, target: _pathlib.Path | None) -> None:
    """Remove an installed skill from the global skills directory."""
    settings = _settings(ctx)
    install_dir = skills.resolve_install_target(
        target or settings.install_target,
        claude_dir=settings.claude_skills_dir,
        opencode_dir=settings.opencode_skills_dir,
        create=False,
    )
    installer = skills.SkillInstaller(settings.catalog_dir, install_dir)

    try:
        removed = installer.uninstall(name)
    except skills.SkillNotFoundError as e:
        _fail(str(e))

    _click.secho(f"Removed {removed}", fg="green")


# =============================================================================
# Assistant-facing views
# =============================================================================


@cli.command(name="graph")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def graph_command(ctx: _click.Context, json_output: bool) -> None:
    """Show cross-references between skills."""
    settings = _settings(ctx)
    _require_catalog(settings, json_output)
    graph = settings.build_registry().reference_graph()

    if json_output:
        _echo_json(graph.to_dict())
        return

    edges = graph.edges()
    if edges:
        table = _rich_table.Table()
        table.add_column("Skill", no_wrap=True)
        table.add_column("References", no_wrap=True)
        for source, target in edges:
            table.add_row(source, target)
        _console().print(table)
    else:
        _click.echo("No cross-references found.")

    orphans = graph.orphans()
    if orphans:
        _click.echo()
        _click.echo(f"Unreferenced skills: {', '.join(orphans)}")

    broken = graph.broken_links()
    if broken:
        _click.echo()
        _click.echo("Broken links:")
        for name, targets in broken.items():
            _click.echo(f"  {name} -> {', '.join(targets)}")


@cli.command(name="recommend")
@_click.argument("text")
@_click.option("--max", "max_results", type=_click.IntRange(min=1), default=3, show_default=True)
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def recommend_command(
    ctx: _click.Context, text: str, max_results: int, json_output: bool
) -> None:
    """Suggest skills whose name or description matches TEXT."""
    settings = _settings(ctx)
    _require_catalog(settings, json_output)
    matches = settings.build_registry().find_matching_skills(text, max_results=max_results)

    if json_output:
        _echo_json({
            "query": text,
            "skills": [{"name": s.name, "description": s.description} for s in matches],
        })
        return

    if not matches:
        _click.echo("No matching skills.")
        return
    for s in matches:
        _click.echo(f"{s.name}: {s.description}")


@cli.command(name="prompt")
@_click.pass_context
def prompt_command(ctx: _click.Context) -> None:
    """Print the skill index for an assistant's system prompt."""
    settings = _settings(ctx)
    _require_catalog(settings)
    index = settings.build_registry().loader.get_all_metadata()
    if not index:
        _click.echo("No skills found.", err=True)
        return
    _click.echo(index)


@cli.command(name="config")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def config_command(ctx: _click.Context, json_output: bool) -> None:
    """Show the effective configuration."""
    settings = _settings(ctx)
    data = settings.to_dict()

    if json_output:
        _echo_json(data)
        return

    _click.echo(f"Project Root: {data['project_root']}")
    _click.echo(f"Skills Dir: {data['catalog_dir']}")
    _click.echo(f"Include Global: {settings.include_global}")
    _click.echo(f"Install Target: {settings.install_target or '(auto)'}")
    _click.echo(f"Description Prefix: {settings.validation.description_prefix!r}")
    _click.echo(f"Body Soft Limit: {settings.validation.body_soft_limit}")
    _click.echo(f"Required Sections: {', '.join(settings.validation.required_sections) or '(none)'}")
    _click.echo(f"Strict: {settings.validation.strict}")
    _click.echo(f"Log Level: {settings.effective_log_level}")


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="aether-skills")


if __name__ == "__main__":
    main()
