from tcpbridge.cli.main import app

app(prog_name="tcpbridge")
