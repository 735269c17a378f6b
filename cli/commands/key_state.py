"""Key state inspection and editing commands."""

from __future__ import annotations

from typing import List, Optional

import typer

from enforcer.db import (
    DbError,
    KeyState,
    KeyStateList,
    get_connection,
    init_db,
    rrstate_from_text,
)

key_state_app = typer.Typer(help="Inspect and edit key states.", no_args_is_help=True)


def _format(ks: KeyState) -> str:
    state = ks.state.name if ks.state < 0 else ks.state_text
    return (
        f"{ks.id:>6}  {state:<12} last_change={ks.last_change}  "
        f"minimize={ks.minimize}  ttl={ks.ttl}"
    )


@key_state_app.command("create")
def key_state_create(
    state: str = typer.Option(..., help="hidden | rumoured | omnipresent | unretentive | NA"),
    last_change: int = typer.Option(0, help="Epoch seconds of the last state change."),
    minimize: bool = typer.Option(False, help="Apply minimal-exposure handling."),
    ttl: int = typer.Option(0, help="TTL in seconds."),
) -> None:
    """Create a key state."""
    conn = get_connection()
    init_db(conn)

    try:
        ks = KeyState(conn)
        ks.state_text = state
        ks.last_change = last_change
        ks.minimize = minimize
        ks.ttl = ttl
        ks.create()
        typer.echo(f"✅ Created key state {ks.id}")
    except DbError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        conn.close()


@key_state_app.command("show")
def key_state_show(
    key_state_id: int = typer.Argument(..., help="Key state id."),
) -> None:
    """Show one key state."""
    conn = get_connection()
    init_db(conn)

    try:
        ks = KeyState(conn)
        ks.get_by_id(key_state_id)
        typer.echo(_format(ks))
    except DbError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        conn.close()


@key_state_app.command("list")
def key_state_list(
    ids: Optional[List[int]] = typer.Argument(None, help="Ids to fetch (all when omitted)."),
) -> None:
    """List key states."""
    conn = get_connection()
    init_db(conn)

    try:
        key_states = KeyStateList(conn)
        if ids:
            key_states.get_by_ids(*ids)
        else:
            key_states.get_all()

        if len(key_states) == 0:
            typer.echo("No key states found.")
            return
        for ks in key_states:
            typer.echo(_format(ks))
        key_states.free()
    except DbError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        conn.close()


@key_state_app.command("set-state")
def key_state_set_state(
    key_state_id: int = typer.Argument(..., help="Key state id."),
    state: str = typer.Argument(..., help="hidden | rumoured | omnipresent | unretentive | NA"),
    last_change: Optional[int] = typer.Option(
        None, help="Epoch seconds of the change (unchanged when omitted)."
    ),
) -> None:
    """Change the RR state of a key state."""
    conn = get_connection()
    init_db(conn)

    try:
        new_state = rrstate_from_text(state)
        ks = KeyState(conn)
        ks.get_by_id(key_state_id)
        old_text = ks.state_text if ks.state >= 0 else ks.state.name
        ks.state = new_state
        if last_change is not None:
            ks.last_change = last_change
        ks.update()
        typer.echo(f"✅ Key state {ks.id}: {old_text} -> {ks.state_text}")
    except DbError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        conn.close()


@key_state_app.command("delete")
def key_state_delete(
    key_state_id: int = typer.Argument(..., help="Key state id."),
) -> None:
    """Delete a key state."""
    conn = get_connection()
    init_db(conn)

    try:
        ks = KeyState(conn)
        ks.get_by_id(key_state_id)
        ks.delete()
        typer.echo(f"🗑️ Deleted key state {key_state_id}")
    except DbError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        conn.close()
