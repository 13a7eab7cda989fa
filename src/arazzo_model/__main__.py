"""CLI utilities for Arazzo descriptions.

Validates description files, prints their normalized form and manages
the JSON Schema of the document model.
"""

from json import dumps
from pathlib import Path
from typing import TYPE_CHECKING
from warnings import catch_warnings, simplefilter

from click import Choice, pass_context
from click import Path as PathParam
from click import argument, echo, group, option
from yaml import safe_load

from arazzo_model.core import DocumentParser
from arazzo_model.errors import ArazzoError, DescriptionError, ReferenceWarning
from arazzo_model.jsonschema import SchemaGenerator

if TYPE_CHECKING:
    from click import Context

    from arazzo_model.schema import Document

SCHEMAS_OPTION = 'yaml.schemas'

DESCRIPTION_PATTERNS = (
    '*.arazzo.yaml',
    '*.arazzo.yml',
)

InputFilepath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)

OutputFilepath = PathParam(
    dir_okay=False,
    readable=True,
    writable=True,
    path_type=Path,
)


@group(help='Command-line utilities for Arazzo workflow descriptions.')
def cli() -> None:
    """Root CLI group for arazzo-model tools."""
    return None


def _check_file(parser: DocumentParser, filepath: Path) -> dict:
    """Validate a single file and collect the outcome.

    Args:
        parser: Description parser.
        filepath: Path of the description file.

    Returns:
        Report with the file name, the validity flag, the issues
        and the reference warnings of the file.
    """
    report = {
        'file': filepath.as_posix(),
        'valid': False,
        'issues': [],
        'warnings': [],
    }

    with catch_warnings(record=True) as caught:
        simplefilter('always', ReferenceWarning)
        try:
            parser.parse_file(filepath)

        except DescriptionError as error:
            report['issues'] = [
                {
                    'path': issue.pointer,
                    'kind': str(issue.kind),
                    'message': issue.message,
                }
                for issue in error.issues
            ]
            report['error'] = str(error)

        except ArazzoError as error:
            report['error'] = str(error)

        else:
            report['valid'] = True

    report['warnings'] = [
        str(warning.message)
        for warning in caught
        if issubclass(warning.category, ReferenceWarning)
    ]

    return report


@cli.command(
    name='validate',
    help='Validate Arazzo description files and report every issue found.',
)
@option(
    '--strict/--relaxed',
    default=None,
    help=(
        'Report unresolved references as errors (strict) or as warnings '
        '(relaxed). Defaults to the ARAZZO_STRICT setting.'
    ),
)
@option(
    '-f', '--format', 'output_format',
    type=Choice(['text', 'json']),
    default='text',
    show_default=True,
    help='Output format of the report.',
)
@argument(
    'files',
    type=InputFilepath,
    nargs=-1,
    required=True,
)
@pass_context
def validate_files(ctx: 'Context', strict: bool | None,
                   output_format: str, files: tuple[Path, ...]) -> None:
    """Validate description files.

    Exits with status 1 when any file is invalid.

    Args:
        ctx: Click context.
        strict: Reference checking mode override.
        output_format: Report format (`text` or `json`).
        files: Description files to validate.
    """
    parser = DocumentParser(strict=strict)
    reports = [_check_file(parser, filepath) for filepath in files]

    if output_format == 'json':
        echo(dumps(reports, ensure_ascii=False, indent=4))

    else:
        for report in reports:
            for warning in report['warnings']:
                echo(f'{report["file"]}: warning: {warning}', err=True)

            if report['valid']:
                echo(f'{report["file"]}: OK')
            else:
                echo(f'{report["file"]}: {report["error"]}')

    if not all(report['valid'] for report in reports):
        ctx.exit(1)


@cli.command(
    name='dump',
    help='Print the normalized JSON form of a valid Arazzo description.',
)
@argument(
    'filepath',
    type=InputFilepath,
)
@pass_context
def dump_file(ctx: 'Context', filepath: Path) -> None:
    """Print the normalized form of a description.

    Args:
        ctx: Click context.
        filepath: Description file.
    """
    try:
        document: Document = DocumentParser().parse_file(filepath)

    except ArazzoError as error:
        echo(str(error), err=True)
        ctx.exit(1)

    echo(dumps(document.dump(), ensure_ascii=False, indent=4))


@cli.command(
    name='schema',
    help='Print the Arazzo JSON Schema to standard output.',
)
def print_schema() -> None:
    """Generate and print the JSON Schema."""
    echo(SchemaGenerator.make_schema())


def _update_schemas(schema: str,
                    schemas: dict[str, str | list[str]]) -> dict[str, str | list[str]]:
    """Update YAML schema mappings for VSCode configuration.

    Args:
        schema: Path to the generated schema file.
        schemas: Existing YAML schema configuration mapping.

    Returns:
        Updated schema configuration.
    """
    if not isinstance(schemas, dict):
        schemas = {}

    return {
        **schemas,
        schema: list(DESCRIPTION_PATTERNS),
    }


@cli.command(
    name='vscode-configure',
    help=(
        'Generate a JSON Schema file and update VSCode settings.json '
        'to enable YAML validation for Arazzo descriptions.'
    ),
)
@option(
    '-s', '--schema',
    type=OutputFilepath,
    help='Output path for the generated JSON Schema file.',
    default='.vscode/arazzo.schema.json',
)
@argument(
    'settings',
    type=OutputFilepath,
    default='.vscode/settings.json',
)
def configure_vscode(schema: Path, settings: Path) -> None:
    """Configure VSCode YAML validation for Arazzo descriptions.

    Args:
        schema: Output path for the schema file.
        settings: Path to VSCode settings file.
    """
    schema.parent.mkdir(parents=True, exist_ok=True)
    with schema.open('wt') as output:
        output.write(SchemaGenerator.make_schema())
        output.write('\n')

    content = {}
    if settings.exists():
        content = safe_load(settings.read_text()) or {}

    content[SCHEMAS_OPTION] = _update_schemas(
        schema.as_posix(),
        content.get(SCHEMAS_OPTION, {}),
    )

    settings.parent.mkdir(parents=True, exist_ok=True)
    with settings.open('wt') as output:
        output.write(dumps(content, ensure_ascii=False, indent=4))
        output.write('\n')


if __name__ == '__main__':
    cli()
