#make it true if you want the logs
logsOn = False


def log(*args):
    if logsOn:
        print(*args)


def set_logs(enabled):
    global logsOn
    logsOn = bool(enabled)
    return logsOn


def toggle_logs():
    return set_logs(not logsOn)
