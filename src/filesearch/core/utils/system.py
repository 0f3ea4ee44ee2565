import psutil


def terminate_process(proc: object) -> bool:
    """
    Kill a child process started by this process.

    Returns False without signalling anything when the process has already
    exited, so repeated or late termination requests are harmless.
    """
    if getattr(proc, "returncode", None) is not None:
        return False
    pid = getattr(proc, "pid", None)
    if not pid:
        return False
    try:
        psutil.Process(pid).kill()
        return True
    except (psutil.NoSuchProcess, psutil.AccessDenied, ProcessLookupError):
        return False
