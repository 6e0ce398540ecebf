"""Static help text for every subcommand.

Plain strings only; :mod:`ssh_cm.cli.app` decides which stream they go
to.
"""

from __future__ import annotations

GENERAL = """\
SSH Connection Manager

Here are the commands you can use:

    ssh-cm add 'nickname' -host 127.0.0.1 -user me
    ssh-cm connect id
    ssh-cm connect nickname
    ssh-cm c id
    ssh-cm c nickname
    ssh-cm def -user root -identity ~/.ssh/id_rsa
    ssh-cm defaults
    ssh-cm export
    ssh-cm help [command]
    ssh-cm import < connections.csv
    ssh-cm list
    ssh-cm rm 'nickname'
    ssh-cm rm id
    ssh-cm search 'something'
    ssh-cm search -host 127.0.0.1
    ssh-cm s 'something'
    ssh-cm set 'nickname' -nickname 'another_nick'
    ssh-cm set id -command tmux

Global options (before the command):

    --db PATH       Use this database file (or set SSH_CM_DB).
    -V, --version   Show the version and exit.
"""

_CONNECTION_FLAGS = """\
    -host         Host name or IP address. Passed to the client verbatim.
    -user         Target user name. Falls back to the 'def' user, then $USER.
    -description  Free-form text shown by list and search.
    -args         Extra client arguments, split like a shell would.
    -identity     Path to an identity file, passed as '-i <path>'.
    -command      Remote command run after connecting.
    -binary       Client program to run instead of the default 'ssh'.
    -id           Request a particular connection ID.
"""

TOPICS: dict[str, str] = {
    "help": "Print help. Pass a subcommand for more topical help.\n",
    "defaults": "Print the default settings for connections.\n",
    "list": (
        "List all connections in the DB.\n"
        "NOTE: If you have a LOT of connections, this could get unpleasant. Fast.\n"
    ),
    "add": (
        "Add a connection. An example:\n\n"
        "    ssh-cm add home -host 127.0.0.1 -user me\n\n"
        "The nickname comes first. It must not start with a digit and must\n"
        "not contain spaces or tabs. -host is required.\n\n"
        "Options (unset values inherit the defaults):\n\n"
        + _CONNECTION_FLAGS
        + "\nA requested -id is best effort: if it is taken, a warning is\n"
        "printed and the database picks the ID instead.\n"
    ),
    "def": (
        "Set default connection settings. Ex.\n\n"
        "    ssh-cm def -user root -identity ~/.ssh/id_rsa\n\n"
        "Accepted: -user -args -identity -command -binary.\n"
        "An empty value ('') clears the default.\n"
    ),
    "set": (
        "Alter an existing connection. Some examples:\n\n"
        "    ssh-cm set 'nickname' -nickname 'another_nick'\n"
        "    ssh-cm set id -command tmux\n\n"
        "Identify the connection by nickname or by ID. Options:\n\n"
        + _CONNECTION_FLAGS
        + "    -nickname     A new nickname.\n\n"
        "Set a value to '' to clear it and inherit the default again:\n\n"
        "    ssh-cm set 7 -user ''\n\n"
        "Changing -id to an ID that already exists is an error.\n"
    ),
    "rm": (
        "Remove a connection. You can remove by nickname or ID:\n\n"
        "    ssh-cm rm 'nickname'\n"
        "    ssh-cm rm id\n"
    ),
    "connect": (
        "Start a connection. You can start by nickname or ID:\n\n"
        "    ssh-cm connect 'nickname'\n"
        "    ssh-cm connect id\n\n"
        "You can also connect using the short form (c):\n\n"
        "    ssh-cm c 'nickname'\n"
        "    ssh-cm c id\n"
    ),
    "export": (
        "Exports all connections as CSV to stdout, in this format:\n\n"
        "id,nickname,host,user,description,args,identity,command,binary\n"
        "1,tank,bsdbox,notroot,,,,,\n"
        "2,asdf,linux,,,,,,\n"
    ),
    "import": (
        "Imports connections from stdin. Supported columns:\n\n"
        "id,nickname,host,user,description,args,identity,command,binary\n\n"
        "The nickname and host columns are mandatory; the rest, including id,\n"
        "are optional and may appear in any order. Rows are imported in input\n"
        "order. A row whose nickname already exists updates that connection\n"
        "with its non-empty columns; other rows are added, keeping their id\n"
        "when it is free.\n\n"
        "Lines that cannot be parsed (stray quotes or commas) are reported\n"
        "and skipped; the rest of the file is still imported.\n"
    ),
    "search": (
        "Search the DB for connections matching your query.\n"
        "You can shorten 'search' to just 's'. Two syntaxes are available:\n\n"
        "  1. Generic search - pass a single argument. Matches the nickname,\n"
        "     host, user and description fields:\n\n"
        "         ssh-cm search 'something'\n\n"
        "  2. Specific search - pass flag/value pairs, all of which must\n"
        "     match. Same flags as add and set:\n\n"
        "         ssh-cm search -host 127.0.0.1 -user me\n"
    ),
}


def topic(name: str | None) -> str:
    """Return help for *name*, or the general help."""
    if name is None:
        return GENERAL
    return TOPICS.get(name, GENERAL)
