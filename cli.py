from pathlib import Path
from typing import Optional

import typer

from commands import create_keystore, digest_xml_file, sign_xml_file
from dsig.config import SigningConfig
from dsig.internal.assembler import RemovalScope
from exceptions.exceptions import XMLSignatureError
from utils.logger import set_verbosity

app = typer.Typer(help="genxmldsig CLI - enveloped XML digital signatures (exclusive C14N, RSA-SHA256)")


# ============================================================================
# Signing Commands
# ============================================================================

@app.command("sign")
def sign(
    document: Path = typer.Argument(..., help="XML document to sign"),
    output: Optional[Path] = typer.Argument(None, help="Signed document (stdout when omitted)"),
    keystore: Path = typer.Option(..., "--keystore", "-k", help="PKCS#12 (.p12/.pfx) or PEM keystore"),
    storepass: Optional[str] = typer.Option(None, "--storepass", envvar="XMLDSIG_STOREPASS",
                                            help="Keystore password"),
    alias: Optional[str] = typer.Option(None, "--alias", "-a", help="Key alias in the keystore"),
    keypass: Optional[str] = typer.Option(None, "--keypass", envvar="XMLDSIG_KEYPASS",
                                          help="Private key password"),
    digest: str = typer.Option("sha256", "--digest", help="Digest algorithm name or URI"),
    signature: str = typer.Option("rsa-sha256", "--signature", help="Signature algorithm name or URI"),
    scope: RemovalScope = typer.Option(RemovalScope.DOCUMENT, "--scope",
                                       help="Which existing signatures are replaced"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline details"),
):
    """
    Sign DOCUMENT with an enveloped signature covering the whole document.

    Existing signatures are removed; the new Signature is appended to the root element.
    """
    set_verbosity(verbose)
    config = SigningConfig.from_names(digest=digest, signature=signature, scope=scope)
    try:
        signed = sign_xml_file(
            str(document),
            str(keystore),
            output_path=str(output) if output else None,
            storepass=storepass,
            alias=alias,
            keypass=keypass,
            config=config,
        )
    except XMLSignatureError as e:
        typer.secho(f"Error signing document: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(signed, nl=False)
    else:
        typer.secho(f"Signed document written to {output}", fg=typer.colors.GREEN)


@app.command("digest")
def digest(
    document: Path = typer.Argument(..., help="XML document"),
    algorithm: str = typer.Option("sha256", "--digest", help="Digest algorithm name or URI"),
):
    """Print the base64 reference digest of DOCUMENT (existing signatures excluded)."""
    try:
        value = digest_xml_file(str(document), SigningConfig.from_names(digest=algorithm))
    except XMLSignatureError as e:
        typer.secho(f"Error computing digest: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(value)


# ============================================================================
# Keystore Commands
# ============================================================================

@app.command("generate-keystore")
def generate_keystore_command(
    output: Path = typer.Argument(..., help="PKCS#12 keystore to create"),
    password: str = typer.Option(..., "--password", "-p", envvar="XMLDSIG_STOREPASS", help="Keystore password"),
    alias: str = typer.Option("envelope", "--alias", "-a", help="Key alias"),
    years: int = typer.Option(1, "--years", "-y", help="Certificate validity in years"),
    key_size: int = typer.Option(2048, "--key-size", help="RSA key size in bits"),
    pem: Optional[Path] = typer.Option(None, "--pem", help="Also write an unencrypted PEM copy"),
):
    """Generate a self-signed RSA signing key in a PKCS#12 keystore."""
    typer.echo(f"Generating {key_size}-bit RSA keystore valid for {years} year(s)...")
    try:
        create_keystore(str(output), password, alias, years=years, key_size=key_size,
                        pem_path=str(pem) if pem else None)
    except (OSError, ValueError) as e:
        typer.secho(f"Error generating keystore: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"Keystore generated successfully: {output}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
