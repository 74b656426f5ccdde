from typing import Any, Dict

import orjson

from migration.models.contract_record import ContractRecord


class ContractRecordMapper(object):
    def json_dict_to_contract_record(self, json_dict: Dict[str, Any]) -> ContractRecord:
        # The registry ships each ABI as a JSON encoded string
        abi = json_dict.get("contractAbi")
        if isinstance(abi, (str, bytes)):
            abi = orjson.loads(abi)

        return ContractRecord(
            code=json_dict["code"],
            address=json_dict["address"],
            name=json_dict.get("contractName"),
            abi=abi or [],
        )
